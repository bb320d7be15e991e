"""
Core value types shared by the readers and the engines.
"""
