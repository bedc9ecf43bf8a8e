"""Repacker validators"""
