"""
Web frontend for the simulator
"""
