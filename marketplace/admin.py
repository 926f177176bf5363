from django.contrib import admin, messages

from infrastructure.container import container
from marketplace.domain.exceptions import MarketplaceError
from marketplace.ordering.domain.order_status import OrderStatus

from .models import Business, ConsumerTrustScore, Order, OrderItem, OrderStatusChange, Product, Rating


def save_product_without_stock(product):
    """Save an existing product with every column except quantity; stock only moves through InventoryLedger."""
    fields = [f.name for f in Product._meta.concrete_fields if not f.primary_key and f.name != 'quantity']
    product.save(update_fields=fields)


class ProductInline(admin.TabularInline):
    model = Product
    extra = 0
    fields = ('name', 'price', 'quantity')
    readonly_fields = ('quantity',)
    show_change_link = True


@admin.register(Business)
class BusinessAdmin(admin.ModelAdmin):
    list_display = ('name', 'owner', 'business_type', 'verified', 'rating', 'total_ratings', 'created_at')
    list_filter = ('business_type', 'verified', 'created_at')
    search_fields = ('name', 'owner__email', 'owner__username')
    readonly_fields = ('id', 'rating', 'total_ratings', 'criteria_breakdown', 'created_at', 'updated_at')
    inlines = [ProductInline]

    fieldsets = (
        (None, {
            'fields': ('id', 'owner', 'name', 'description', 'business_type', 'verified')
        }),
        ('Contact', {
            'fields': ('contact_email', 'contact_phone')
        }),
        ('Reputation', {
            'fields': ('rating', 'total_ratings', 'criteria_breakdown')
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        })
    )

    def save_formset(self, request, form, formset, change):
        if formset.model is not Product:
            return super().save_formset(request, form, formset, change)
        for product in formset.save(commit=False):
            if product._state.adding:
                product.save()
            else:
                save_product_without_stock(product)
        for product in formset.deleted_objects:
            product.delete()
        formset.save_m2m()


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ('name', 'business', 'price', 'quantity', 'in_stock', 'created_at')
    list_filter = ('business', 'category', 'created_at')
    search_fields = ('name', 'description', 'business__name')
    readonly_fields = ('id', 'created_at', 'updated_at')

    def get_readonly_fields(self, request, obj=None):
        # Initial stock is set on creation only
        if obj is None:
            return self.readonly_fields
        return self.readonly_fields + ('quantity',)

    def save_model(self, request, obj, form, change):
        if change:
            save_product_without_stock(obj)
        else:
            super().save_model(request, obj, form, change)

    def in_stock(self, obj):
        return obj.in_stock
    in_stock.boolean = True


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    can_delete = False
    readonly_fields = ('product', 'product_name', 'quantity', 'price_at_purchase')

    def has_add_permission(self, request, obj=None):
        return False


class OrderStatusChangeInline(admin.TabularInline):
    model = OrderStatusChange
    extra = 0
    can_delete = False
    readonly_fields = ('from_status', 'to_status', 'actor', 'reason', 'created_at')

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ('id', 'buyer', 'business', 'status', 'payment_status', 'delivery_method',
                    'total_amount', 'created_at')
    list_filter = ('status', 'payment_status', 'delivery_method', 'created_at')
    search_fields = ('id', 'buyer__username', 'buyer__email', 'business__name')
    # Status and payment status only change through OrderStateMachine
    readonly_fields = ('id', 'buyer', 'business', 'status', 'payment_status', 'delivery_method',
                       'total_amount', 'contact', 'created_at', 'updated_at')

    inlines = [OrderItemInline, OrderStatusChangeInline]

    actions = ['cancel_orders']

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False

    def cancel_orders(self, request, queryset):
        state_machine = container.order_state_machine()
        cancelled = 0
        for order in queryset:
            try:
                state_machine.transition(order.id, request.user, OrderStatus.CANCELLED, reason="Cancelled by admin")
            except MarketplaceError as e:
                self.message_user(request, f"Order {order.id}: {e.message}", level=messages.WARNING)
            else:
                cancelled += 1
        self.message_user(request, f"{cancelled} orders cancelled.")
    cancel_orders.short_description = "Cancel selected orders and release stock"


@admin.register(Rating)
class RatingAdmin(admin.ModelAdmin):
    list_display = ('id', 'order', 'direction', 'rater', 'ratee', 'stars', 'created_at')
    list_filter = ('direction', 'stars', 'created_at')
    search_fields = ('order__id', 'rater__email', 'ratee__email', 'business__name')

    # Ratings are immutable
    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(ConsumerTrustScore)
class ConsumerTrustScoreAdmin(admin.ModelAdmin):
    list_display = ('consumer', 'overall_score', 'total_ratings', 'updated_at')
    search_fields = ('consumer__email', 'consumer__username')
    readonly_fields = ('consumer', 'overall_score', 'total_ratings', 'breakdown', 'updated_at')

    def has_add_permission(self, request):
        return False
