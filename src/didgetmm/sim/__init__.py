"""
Acoustic simulation of didgeridoo bores by the transfer matrix method.
"""
