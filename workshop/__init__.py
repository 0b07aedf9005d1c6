"""Vehicle workshop service API"""
