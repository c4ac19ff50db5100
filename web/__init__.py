"""
Web driver for the CPU Scheduling Simulator
"""
