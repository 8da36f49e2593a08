# storefront/handlers/user_handlers.py
from telegram import Update
from telegram.ext import ContextTypes
from .base_handler import BaseHandler, handles_errors
from ..exceptions import NotFoundError
from ..services.category_service import CategoryService
from ..services.campaign_service import CampaignService
from ..services.order_service import OrderService
from ..services.product_service import ProductService
from ..services.user_service import UserService
from ..services import pricing
from ..utils.formatters import format_price

HELP_TEXT = (
    "/products [page] - browse the catalog\n"
    "/product <id> - product details\n"
    "/categories - browse by category\n"
    "/cart - show your cart\n"
    "/add <product id> [quantity] - add to cart\n"
    "/remove <cart item id> - remove from cart\n"
    "/checkout - place an order\n"
    "/orders - your orders\n"
    "/order <id> - order details"
)

class UserHandler(BaseHandler):
    """Catalog browsing and order history"""
    def __init__(self, db):
        super().__init__(db)
        self.user_service = UserService(db)
        self.product_service = ProductService(db)
        self.category_service = CategoryService(db)
        self.campaign_service = CampaignService(db)
        self.order_service = OrderService(db)

    @handles_errors
    async def start(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """/start: register the user and show the main menu"""
        user = update.effective_user

        await self.user_service.register_user(
            user_id=user.id,
            username=user.username,
            first_name=user.first_name,
            last_name=user.last_name
        )

        await update.message.reply_text(
            f"Hi {user.first_name}! 👋\n\n"
            "Welcome to the store. Use the menu below to browse products.",
            reply_markup=self.keyboards.main_menu()
        )

    async def help(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """/help"""
        await update.message.reply_text(HELP_TEXT)

    async def show_main_menu(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        await self.reply(update, "🏠 Main menu", self.keyboards.main_menu())

    @handles_errors
    async def show_products(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Paginated catalog with effective prices"""
        if update.callback_query:
            page = self.callback_id(update)
        else:
            page = self.int_arg(context, 0, 1)

        result = await self.product_service.get_paginated(page)
        campaigns = await self.campaign_service.list_active_campaigns()

        if not result['products']:
            await self.reply(update, "No products available yet.", self.keyboards.main_menu())
            return

        text = f"📦 Products (page {result['page']}/{result['total_pages']}):\n\n"
        for product in result['products']:
            price = pricing.effective_price(product, campaigns)
            text += f"#{product['product_id']} {product['name']} - {format_price(price)}"
            if price < product['price']:
                text += f" (was {format_price(product['price'])})"
            text += "\n"

        await self.reply(
            update,
            text,
            self.keyboards.product_list_menu(result['products'], result['page'], result['total_pages'])
        )

    @handles_errors
    async def show_product(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Product details with campaign badges"""
        if update.callback_query:
            product_id = self.callback_id(update)
        else:
            product_id = self.int_arg(context, 0)
            if product_id is None:
                await update.message.reply_text("Usage: /product <id>")
                return

        product = await self.product_service.get_product(product_id)
        if not product:
            raise NotFoundError("Product not found")
        campaigns = await self.campaign_service.list_active_campaigns()

        await self.reply(
            update,
            self.messages.format_product(product, campaigns),
            self.keyboards.product_menu(product_id, in_stock=product['quantity'] > 0)
        )

    @handles_errors
    async def show_categories(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Categories ordered by name"""
        categories = await self.category_service.get_all_categories()
        if not categories:
            await self.reply(update, "No categories yet.", self.keyboards.main_menu())
            return

        await self.reply(
            update,
            "🗂 Categories:",
            self.keyboards.category_list_menu(categories)
        )

    @handles_errors
    async def show_category(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Products of one category with effective prices"""
        if update.callback_query:
            category_id = self.callback_id(update)
        else:
            category_id = self.int_arg(context, 0)
            if category_id is None:
                await update.message.reply_text("Usage: /category <id>")
                return

        category = await self.category_service.get_category(category_id)
        if not category:
            raise NotFoundError("Category not found")
        products = await self.product_service.get_category_products(category_id)
        campaigns = await self.campaign_service.list_active_campaigns()

        text = f"🗂 {category['name']}\n\n"
        if not products:
            text += "No products in this category yet."
        for product in products:
            price = pricing.effective_price(product, campaigns)
            text += f"#{product['product_id']} {product['name']} - {format_price(price)}\n"

        await self.reply(update, text, self.keyboards.category_menu(products))

    @handles_errors
    async def show_orders(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Order history"""
        orders = await self.order_service.get_user_orders(update.effective_user.id)

        if not orders:
            text = "You have not placed any orders yet."
        else:
            text = "📝 Your orders:\n\n" + "\n".join(
                self.messages.format_order(order) for order in orders
            )
        await self.reply(update, text, self.keyboards.main_menu())

    @handles_errors
    async def show_order(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """/order <id>"""
        order_id = self.int_arg(context, 0)
        if order_id is None:
            await update.message.reply_text("Usage: /order <id>")
            return

        order = await self.order_service.get_order(update.effective_user.id, order_id)
        await update.message.reply_text(self.messages.format_order(order))
