"""Per-date working hours and bookable slots"""
