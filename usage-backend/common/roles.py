from django.db import models

class UserRole(models.TextChoices):
    ADMIN     = "admin",     "Admin"
    MANAGER   = "manager",   "Manager"
    ASSOCIATE = "associate", "Associate"


class UserStatus(models.TextChoices):
    ACTIVE   = "active",   "Active"
    INACTIVE = "inactive", "Inactive"
