"""Booking services into availability slots"""
