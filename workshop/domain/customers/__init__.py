"""Customer records"""
