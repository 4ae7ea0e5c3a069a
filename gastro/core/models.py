from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    """Marketplace account: buyer, supplier or admin"""
    ROLE_USER = 'user'
    ROLE_SUPPLIER = 'supplier'
    ROLE_ADMIN = 'admin'
    ROLE_CHOICES = [
        (ROLE_USER, 'Customer'),
        (ROLE_SUPPLIER, 'Supplier'),
        (ROLE_ADMIN, 'Admin'),
    ]

    email = models.EmailField(unique=True)
    name = models.CharField(max_length=255, blank=True)
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default=ROLE_USER)
    company_name = models.CharField(max_length=255, blank=True, null=True)
    cnpj = models.CharField(max_length=20, blank=True, null=True, help_text="Brazilian company registration number")
    phone = models.CharField(max_length=20, blank=True, null=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'users'
        indexes = [
            models.Index(fields=['role'], name='idx_users_role'),
        ]

    def __str__(self):
        return self.name or self.username

    @property
    def is_admin_role(self):
        return self.role == self.ROLE_ADMIN or self.is_superuser

    @property
    def is_supplier(self):
        return self.role == self.ROLE_SUPPLIER

    @property
    def display_name(self):
        return self.company_name or self.name or self.username


class AuditLog(models.Model):
    """Audit log for critical marketplace operations"""
    ACTION_CHOICES = [
        ('create', 'Create'),
        ('update', 'Update'),
        ('delete', 'Delete'),
        ('register', 'User Registered'),
        ('role_change', 'Role Changed'),
        ('price_change', 'Price Change'),
        ('stock_adjust', 'Stock Adjustment'),
        ('bulk_stock_update', 'Bulk Stock Update'),
        ('cart_add', 'Add to Cart'),
        ('cart_remove', 'Remove from Cart'),
        ('cart_update', 'Cart Update'),
        ('cart_checkout', 'Cart Checkout'),
        ('sale_create', 'Sale Recorded'),
        ('payment_intent', 'Payment Intent Created'),
        ('commission_change', 'Commission Changed'),
        ('group_update', 'Product Group Updated'),
    ]

    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, related_name='audit_logs')
    action = models.CharField(max_length=50, choices=ACTION_CHOICES)
    model_name = models.CharField(max_length=100)
    object_id = models.CharField(max_length=100)
    object_name = models.CharField(max_length=255, blank=True, null=True, help_text="Human-readable name of the object (e.g., product name, order number)")
    object_reference = models.CharField(max_length=255, blank=True, null=True, help_text="Reference identifier (e.g., order number)")
    changes = models.JSONField(default=dict, blank=True)
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'audit_logs'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['-created_at'], name='idx_audit_created'),
            models.Index(fields=['action'], name='idx_audit_action'),
            models.Index(fields=['model_name'], name='idx_audit_model'),
            models.Index(fields=['object_reference'], name='idx_audit_reference'),
        ]

    def __str__(self):
        return f"{self.action} {self.model_name}#{self.object_id}"
