"""Domain packages: one folder per resource with schemas, repository, service and router"""
