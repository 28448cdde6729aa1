from gachasim.main import main

raise SystemExit(main())
