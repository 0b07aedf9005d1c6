"""Service reminders and the due-reminder sweep"""
