"""Helper modules for Repacker"""
