"""
User interface module for the gacha simulator.
"""
