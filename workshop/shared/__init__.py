"""Helpers shared across the domain packages"""
