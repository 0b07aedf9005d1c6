"""Vehicle records"""
