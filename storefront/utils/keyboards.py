# storefront/utils/keyboards.py
from typing import Any, Dict, List
from telegram import InlineKeyboardButton, InlineKeyboardMarkup
from ..models.order import PaymentMethod

class Keyboards:
    @staticmethod
    def main_menu() -> InlineKeyboardMarkup:
        """Main menu keyboard"""
        keyboard = [
            [InlineKeyboardButton("🛍 Products", callback_data="products_1")],
            [InlineKeyboardButton("🗂 Categories", callback_data="categories")],
            [InlineKeyboardButton("🛒 My cart", callback_data="cart")],
            [InlineKeyboardButton("📝 My orders", callback_data="orders")]
        ]
        return InlineKeyboardMarkup(keyboard)

    @staticmethod
    def admin_menu() -> InlineKeyboardMarkup:
        """Admin panel keyboard"""
        keyboard = [
            [InlineKeyboardButton("🎫 Campaigns", callback_data="admin_campaigns_1"),
             InlineKeyboardButton("📦 Orders", callback_data="admin_orders_1")],
            [InlineKeyboardButton("👥 Users", callback_data="admin_users_1"),
             InlineKeyboardButton("📈 Report (7 days)", callback_data="admin_report_week")],
            [InlineKeyboardButton("📅 Today", callback_data="admin_report_today"),
             InlineKeyboardButton("🗓 This month", callback_data="admin_report_month")],
            [InlineKeyboardButton("🏠 Main menu", callback_data="main_menu")]
        ]
        return InlineKeyboardMarkup(keyboard)

    @staticmethod
    def product_list_menu(products: List[Dict[str, Any]], page: int, total_pages: int) -> InlineKeyboardMarkup:
        """One button per product plus paging"""
        keyboard = [
            [InlineKeyboardButton(product['name'], callback_data=f"product_{product['product_id']}")]
            for product in products
        ]

        nav_buttons = []
        if page > 1:
            nav_buttons.append(InlineKeyboardButton("⬅️ Previous", callback_data=f"products_{page - 1}"))
        if page < total_pages:
            nav_buttons.append(InlineKeyboardButton("Next ➡️", callback_data=f"products_{page + 1}"))
        if nav_buttons:
            keyboard.append(nav_buttons)
        keyboard.append([InlineKeyboardButton("🏠 Main menu", callback_data="main_menu")])

        return InlineKeyboardMarkup(keyboard)

    @staticmethod
    def category_list_menu(categories: List[Dict[str, Any]]) -> InlineKeyboardMarkup:
        """One button per category"""
        keyboard = [
            [InlineKeyboardButton(category['name'], callback_data=f"category_{category['category_id']}")]
            for category in categories
        ]
        keyboard.append([InlineKeyboardButton("🏠 Main menu", callback_data="main_menu")])
        return InlineKeyboardMarkup(keyboard)

    @staticmethod
    def category_menu(products: List[Dict[str, Any]]) -> InlineKeyboardMarkup:
        """Products of a category"""
        keyboard = [
            [InlineKeyboardButton(product['name'], callback_data=f"product_{product['product_id']}")]
            for product in products
        ]
        keyboard.append([
            InlineKeyboardButton("⬅️ Categories", callback_data="categories"),
            InlineKeyboardButton("🏠 Main menu", callback_data="main_menu")
        ])
        return InlineKeyboardMarkup(keyboard)

    @staticmethod
    def product_menu(product_id: int, in_stock: bool = True) -> InlineKeyboardMarkup:
        """Product detail keyboard"""
        keyboard = []
        if in_stock:
            keyboard.append([InlineKeyboardButton("🛒 Add to cart", callback_data=f"add_{product_id}")])
        keyboard.append([
            InlineKeyboardButton("⬅️ Back", callback_data="products_1"),
            InlineKeyboardButton("🏠 Main menu", callback_data="main_menu")
        ])
        return InlineKeyboardMarkup(keyboard)

    @staticmethod
    def cart_menu(lines: List[Dict[str, Any]]) -> InlineKeyboardMarkup:
        """Remove buttons per line, then checkout"""
        keyboard = [
            [InlineKeyboardButton(f"❌ Remove {line['name']}", callback_data=f"remove_{line['cart_item_id']}")]
            for line in lines
        ]
        if lines:
            keyboard.append([InlineKeyboardButton("💳 Checkout", callback_data="checkout")])
        keyboard.append([InlineKeyboardButton("🏠 Main menu", callback_data="main_menu")])
        return InlineKeyboardMarkup(keyboard)

    @staticmethod
    def payment_methods() -> InlineKeyboardMarkup:
        """Payment method keyboard"""
        keyboard = [
            [InlineKeyboardButton("💳 Card", callback_data=f"pay_{PaymentMethod.CARD.value}")],
            [InlineKeyboardButton("🏦 Bank transfer", callback_data=f"pay_{PaymentMethod.BANK_TRANSFER.value}")],
            [InlineKeyboardButton("💵 Cash on delivery", callback_data=f"pay_{PaymentMethod.CASH_ON_DELIVERY.value}")],
            [InlineKeyboardButton("❌ Cancel", callback_data="cancel")]
        ]
        return InlineKeyboardMarkup(keyboard)

    @staticmethod
    def campaign_menu(campaign: Dict[str, Any]) -> InlineKeyboardMarkup:
        """Lifecycle actions valid for the campaign's status"""
        actions = {
            "DRAFT": [("▶️ Activate", "activate")],
            "ACTIVE": [("⏸ Pause", "pause"), ("⏹ End", "end")],
            "PAUSED": [("▶️ Resume", "resume"), ("⏹ End", "end")],
            "ENDED": []
        }
        campaign_id = campaign['campaign_id']
        row = [
            InlineKeyboardButton(label, callback_data=f"campaign_{action}_{campaign_id}")
            for label, action in actions.get(campaign['status'], [])
        ]
        keyboard = [row] if row else []
        keyboard.append([InlineKeyboardButton("🔙 Campaigns", callback_data="admin_campaigns_1")])
        return InlineKeyboardMarkup(keyboard)

    @staticmethod
    def page_menu(prefix: str, page: int, total_pages: int) -> InlineKeyboardMarkup:
        """Previous/next buttons for admin listings"""
        nav_buttons = []
        if page > 1:
            nav_buttons.append(InlineKeyboardButton("⬅️", callback_data=f"{prefix}_{page - 1}"))
        if page < total_pages:
            nav_buttons.append(InlineKeyboardButton("➡️", callback_data=f"{prefix}_{page + 1}"))
        keyboard = [nav_buttons] if nav_buttons else []
        keyboard.append([InlineKeyboardButton("🔙 Admin panel", callback_data="admin_menu")])
        return InlineKeyboardMarkup(keyboard)
