# storefront/bot.py
import logging
from telegram.ext import (
    Application,
    CommandHandler,
    CallbackQueryHandler,
)
from .config import Config
from .database import Database
from .handlers import AdminHandler, CartHandler, UserHandler

class StorefrontBot:
    def __init__(self, db: Database = None):
        """Build the application and wire handlers to one shared Database"""
        self.logger = logging.getLogger(__name__)
        self.db = db or Database()
        self.application = (
            Application.builder()
            .token(Config.TELEGRAM_TOKEN)
            .post_init(self._on_startup)
            .post_shutdown(self._on_shutdown)
            .build()
        )
        self.user_handler = UserHandler(self.db)
        self.cart_handler = CartHandler(self.db)
        self.admin_handler = AdminHandler(self.db)
        self.setup_handlers()

    async def _on_startup(self, application: Application):
        await self.db.connect()

    async def _on_shutdown(self, application: Application):
        await self.db.close()

    def setup_handlers(self):
        """Register command and button handlers"""
        app = self.application
        users = self.user_handler
        cart = self.cart_handler
        admin = self.admin_handler

        # Checkout conversation first so its states win over generic handlers
        app.add_handler(cart.conversation_handler())

        # Shopper commands
        app.add_handler(CommandHandler("start", users.start))
        app.add_handler(CommandHandler("help", users.help))
        app.add_handler(CommandHandler("products", users.show_products))
        app.add_handler(CommandHandler("product", users.show_product))
        app.add_handler(CommandHandler("categories", users.show_categories))
        app.add_handler(CommandHandler("category", users.show_category))
        app.add_handler(CommandHandler("orders", users.show_orders))
        app.add_handler(CommandHandler("order", users.show_order))
        app.add_handler(CommandHandler("cart", cart.show_cart))
        app.add_handler(CommandHandler("add", cart.add_to_cart))
        app.add_handler(CommandHandler("remove", cart.remove_item))

        # Admin commands
        app.add_handler(CommandHandler("admin", admin.admin_panel))
        app.add_handler(CommandHandler("campaigns", admin.list_campaigns))
        app.add_handler(CommandHandler("campaign", admin.campaign_command))
        app.add_handler(CommandHandler("newcampaign", admin.new_campaign))
        app.add_handler(CommandHandler("adminorders", admin.list_orders))
        app.add_handler(CommandHandler("setorderstatus", admin.set_order_status))
        app.add_handler(CommandHandler("users", admin.list_users))
        app.add_handler(CommandHandler("setrole", admin.set_role))
        app.add_handler(CommandHandler("report", admin.report))
        app.add_handler(CommandHandler("exportreport", admin.export_report))

        # Buttons
        app.add_handler(CallbackQueryHandler(users.show_main_menu, pattern=r'^main_menu$'))
        app.add_handler(CallbackQueryHandler(users.show_products, pattern=r'^products_\d+$'))
        app.add_handler(CallbackQueryHandler(users.show_product, pattern=r'^product_\d+$'))
        app.add_handler(CallbackQueryHandler(users.show_categories, pattern=r'^categories$'))
        app.add_handler(CallbackQueryHandler(users.show_category, pattern=r'^category_\d+$'))
        app.add_handler(CallbackQueryHandler(users.show_orders, pattern=r'^orders$'))
        app.add_handler(CallbackQueryHandler(cart.show_cart, pattern=r'^cart$'))
        app.add_handler(CallbackQueryHandler(cart.add_to_cart, pattern=r'^add_\d+$'))
        app.add_handler(CallbackQueryHandler(cart.remove_item, pattern=r'^remove_\d+$'))
        app.add_handler(CallbackQueryHandler(admin.admin_panel, pattern=r'^admin_menu$'))
        app.add_handler(CallbackQueryHandler(admin.list_campaigns, pattern=r'^admin_campaigns_\d+$'))
        app.add_handler(CallbackQueryHandler(admin.list_orders, pattern=r'^admin_orders_\d+$'))
        app.add_handler(CallbackQueryHandler(admin.list_users, pattern=r'^admin_users_\d+$'))
        app.add_handler(CallbackQueryHandler(admin.report, pattern=r'^admin_report_(\d+|today|week|month)$'))
        app.add_handler(
            CallbackQueryHandler(admin.campaign_button, pattern=r'^campaign_(activate|pause|resume|end)_\d+$')
        )

    def run(self):
        """Start polling until interrupted"""
        self.logger.info("Starting bot...")
        self.application.run_polling()
