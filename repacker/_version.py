"""Repacker Version"""
__version__ = '1.0.0'
