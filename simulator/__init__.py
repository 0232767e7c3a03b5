"""
Simulator package for the classic combat DPS simulator.

This package contains all the modules of the simulator: the core
enumerations and console helpers, character builds and talents, the combat
formulas, the time-stepped simulation engine and the console reports.
"""
