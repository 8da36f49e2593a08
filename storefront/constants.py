# storefront/constants.py

# Checkout conversation states
WAITING_ADDRESS, WAITING_PAYMENT_METHOD = range(2)

# Address lines are sent as one comma separated message
ADDRESS_FIELDS = ['line1', 'city', 'state', 'postal_code', 'country']
ADDRESS_FIELDS_WITH_LINE2 = ['line1', 'line2', 'city', 'state', 'postal_code', 'country']

# Keys accepted by /newcampaign, mapped to campaign fields
CAMPAIGN_INPUT_KEYS = {
    'name': 'name',
    'description': 'description',
    'type': 'type',
    'status': 'status',
    'start': 'start_date',
    'end': 'end_date',
    'all': 'apply_to_all_products',
    'value': 'discount_value',
    'max': 'maximum_discount_amount',
    'buy': 'buy_quantity',
    'get': 'get_quantity',
    'flat': 'flat_price',
    'min_order': 'minimum_order_amount',
    'max_usage': 'max_usage',
    'products': 'product_ids',
    'categories': 'category_ids',
}
