"""Service history records"""
