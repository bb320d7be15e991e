"""
This module contains the containers that carry parsed alignment data between the readers and the engines.
"""
