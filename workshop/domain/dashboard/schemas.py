from pydantic import BaseModel


class DashboardStats(BaseModel):
    totalCustomers: int
    totalVehicles: int
    totalServices: int
    servicesToday: int
    pendingReminders: int
