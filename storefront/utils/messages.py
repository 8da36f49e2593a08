# storefront/utils/messages.py
from typing import Any, Dict, Iterable
from ..models.order import OrderStatus
from ..services import pricing
from ..utils.formatters import format_price, format_datetime

STATUS_EMOJI = {
    OrderStatus.PENDING.value: "⏳",
    OrderStatus.PROCESSING.value: "⚙️",
    OrderStatus.SHIPPED.value: "🚚",
    OrderStatus.DELIVERED.value: "📦",
    OrderStatus.CANCELLED.value: "❌"
}

class Messages:
    @staticmethod
    def format_product(product: Dict[str, Any], campaigns: Iterable[Dict[str, Any]]) -> str:
        """Product detail with campaign badges and effective price"""
        campaigns = list(campaigns)
        applicable = pricing.applicable_campaigns(product, campaigns)
        price = pricing.effective_price(product, campaigns)

        if price < product['price']:
            price_text = f"💰 Price: {format_price(price)} (was {format_price(product['price'])})"
        else:
            price_text = f"💰 Price: {format_price(product['price'])}"

        lines = [
            f"🏷 {product['name']}",
            f"🏭 Brand: {product.get('brand') or '-'}",
            f"🗂 Category: {product.get('category_name') or '-'}",
            f"📝 {product.get('description') or ''}",
            price_text,
            f"🔄 Stock: {'in stock' if product.get('quantity', 0) > 0 else 'out of stock'}"
        ]
        if applicable:
            lines.append("🎉 " + " | ".join(pricing.badge_label(c) for c in applicable))
        return "\n".join(lines)

    @staticmethod
    def format_cart(summary: Dict[str, Any]) -> str:
        """Cart lines priced with campaigns"""
        if not summary['lines']:
            return "🛒 Your cart is empty."

        text = "🛒 Your cart:\n\n"
        for line in summary['lines']:
            text += f"- {line['quantity']}x {line['name']}: {format_price(line['effective_price'])}"
            if line['effective_price'] != line['unit_price']:
                text += f" (was {format_price(line['unit_price'])})"
            text += "\n"
        text += f"\n💰 Subtotal: {format_price(summary['subtotal'])}"
        return text

    @staticmethod
    def format_order(order: Dict[str, Any]) -> str:
        """Order summary line block"""
        text = (
            f"🛍 Order #{order['order_id']}\n"
            f"💰 Total: {format_price(order['total'])}\n"
            f"📊 Status: {STATUS_EMOJI.get(order['status'], '')} {order['status']}\n"
            f"🕒 Date: {format_datetime(order.get('created_at'))}\n"
        )
        items = order.get('items')
        if items:
            text += "------------------\n"
            text += "\n".join(
                f"- {item['quantity']}x {item['name']}: {format_price(item['price'])}"
                for item in items
            ) + "\n"
        address = order.get('address')
        if address:
            text += (
                f"📍 {address['line1']}, {address['city']}, {address['state']} "
                f"{address['postal_code']}, {address['country']}\n"
            )
        payment = order.get('payment')
        if payment:
            text += f"💳 Payment: {payment['method']} ({payment['status']})\n"
        return text

    @staticmethod
    def format_campaign(campaign: Dict[str, Any]) -> str:
        """Admin view of a campaign"""
        if campaign.get('apply_to_all_products'):
            scope = "all products"
        else:
            scope = (
                f"{len(campaign.get('product_ids') or [])} products, "
                f"{len(campaign.get('category_ids') or [])} categories"
            )
        usage = f"{campaign.get('usage_count', 0)}"
        if campaign.get('max_usage'):
            usage += f"/{campaign['max_usage']}"
        return (
            f"🎫 #{campaign['campaign_id']} {campaign['name']}\n"
            f"🏷 {pricing.badge_label(campaign)}\n"
            f"📊 Status: {campaign['status']}\n"
            f"📅 {format_datetime(campaign['start_date'])} → {format_datetime(campaign['end_date'])}\n"
            f"🎯 Scope: {scope}\n"
            f"📈 Used: {usage}\n"
        )

    @staticmethod
    def format_report(report: Dict[str, Any]) -> str:
        """Sales report text"""
        text = (
            f"📈 Report {report['period']['start']} → {report['period']['end']}\n\n"
            f"Orders: {report['summary']['total_orders']:,}\n"
            f"Revenue: {format_price(report['summary']['total_revenue'])}\n"
        )
        if report['daily_metrics']:
            text += "\n📅 Daily:\n"
            for metric in report['daily_metrics']:
                text += f"{metric['date']}: {metric['order_count']} orders, {format_price(metric['total_revenue'])}\n"
        if report['top_products']:
            text += "\n🏆 Top products:\n"
            for product in report['top_products']:
                text += f"- {product['name']}: {product['total_quantity']} sold\n"
        if report['order_status_distribution']:
            text += "\n📊 Statuses:\n"
            for row in report['order_status_distribution']:
                text += f"{STATUS_EMOJI.get(row['status'], '')} {row['status']}: {row['count']}\n"
        return text
