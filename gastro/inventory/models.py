from django.db import models


def compute_stock_status(quantity, threshold):
    """out_of_stock at or below zero, low_stock under the threshold, otherwise in_stock"""
    if quantity <= 0:
        return Stock.STATUS_OUT_OF_STOCK
    if quantity < threshold:
        return Stock.STATUS_LOW_STOCK
    return Stock.STATUS_IN_STOCK


class Stock(models.Model):
    """Available quantity for a supplier's product"""
    STATUS_IN_STOCK = 'in_stock'
    STATUS_LOW_STOCK = 'low_stock'
    STATUS_OUT_OF_STOCK = 'out_of_stock'
    STATUS_CHOICES = [
        (STATUS_IN_STOCK, 'In Stock'),
        (STATUS_LOW_STOCK, 'Low Stock'),
        (STATUS_OUT_OF_STOCK, 'Out of Stock'),
    ]

    product = models.OneToOneField('catalog.Product', on_delete=models.CASCADE, related_name='stock')
    quantity = models.IntegerField(default=0)
    low_stock_threshold = models.IntegerField(default=10)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_OUT_OF_STOCK, db_index=True)
    last_stock_update = models.DateTimeField(auto_now=True)

    def save(self, *args, **kwargs):
        if self.quantity < 0:
            self.quantity = 0
        self.status = compute_stock_status(self.quantity, self.low_stock_threshold)
        update_fields = kwargs.get('update_fields')
        if update_fields is not None and 'status' not in update_fields:
            kwargs['update_fields'] = list(update_fields) + ['status', 'last_stock_update']
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.product.name}: {self.quantity}"

    class Meta:
        db_table = 'stock'
        indexes = [
            models.Index(fields=['status'], name='idx_stock_status'),
        ]


class StockAdjustment(models.Model):
    """History of stock quantity changes"""
    REASON_CHOICES = [
        ('manual', 'Manual'),
        ('bulk_update', 'Bulk Update'),
        ('sale', 'Sale'),
        ('correction', 'Correction'),
        ('restock', 'Restock'),
    ]

    product = models.ForeignKey('catalog.Product', on_delete=models.CASCADE, related_name='stock_adjustments')
    previous_quantity = models.IntegerField()
    new_quantity = models.IntegerField()
    delta = models.IntegerField()
    reason = models.CharField(max_length=20, choices=REASON_CHOICES, default='manual')
    notes = models.TextField(blank=True)
    created_by = models.ForeignKey('core.User', on_delete=models.SET_NULL, null=True, blank=True, related_name='stock_adjustments')
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.product.name} {self.previous_quantity} -> {self.new_quantity} ({self.reason})"

    class Meta:
        db_table = 'stock_adjustments'
        ordering = ['-created_at', '-id']
