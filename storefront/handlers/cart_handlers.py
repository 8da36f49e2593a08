# storefront/handlers/cart_handlers.py
from telegram import Update
from telegram.ext import (
    ContextTypes, ConversationHandler, CommandHandler,
    MessageHandler, CallbackQueryHandler, filters
)
from .base_handler import BaseHandler, handles_errors
from ..constants import WAITING_ADDRESS, WAITING_PAYMENT_METHOD
from ..services.campaign_service import CampaignService
from ..services.cart_service import CartService
from ..services.order_service import OrderService
from ..utils.formatters import format_price
from ..utils.parsers import parse_address_text

class CartHandler(BaseHandler):
    """Cart and checkout"""
    def __init__(self, db):
        super().__init__(db)
        self.cart_service = CartService(db)
        self.campaign_service = CampaignService(db)
        self.order_service = OrderService(db)

    async def _send_cart(self, update: Update):
        campaigns = await self.campaign_service.list_active_campaigns()
        summary = await self.cart_service.get_cart_summary(update.effective_user.id, campaigns)
        await self.reply(
            update,
            self.messages.format_cart(summary),
            self.keyboards.cart_menu(summary['lines'])
        )

    @handles_errors
    async def show_cart(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        await self._send_cart(update)

    @handles_errors
    async def add_to_cart(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Button add_<id> or /add <product id> [quantity]"""
        if update.callback_query:
            product_id, quantity = self.callback_id(update), 1
        else:
            product_id = self.int_arg(context, 0)
            quantity = self.int_arg(context, 1, 1)
            if product_id is None:
                await update.message.reply_text("Usage: /add <product id> [quantity]")
                return

        await self.cart_service.add_to_cart(update.effective_user.id, product_id, quantity)
        count = await self.cart_service.get_item_count(update.effective_user.id)
        await self.reply(
            update,
            f"✅ Added to cart. You now have {count} item(s).",
            self.keyboards.main_menu()
        )

    @handles_errors
    async def remove_item(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Button remove_<item id> or /remove <item id>"""
        if update.callback_query:
            cart_item_id = self.callback_id(update)
        else:
            cart_item_id = self.int_arg(context, 0)
            if cart_item_id is None:
                await update.message.reply_text("Usage: /remove <cart item id>")
                return

        await self.cart_service.remove_from_cart(update.effective_user.id, cart_item_id)
        await self._send_cart(update)

    @handles_errors(on_error=ConversationHandler.END)
    async def start_checkout(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Ask for the shipping address"""
        count = await self.cart_service.get_item_count(update.effective_user.id)
        if not count:
            await self.reply(update, "🛒 Your cart is empty.", self.keyboards.main_menu())
            return ConversationHandler.END

        await self.reply(
            update,
            "📍 Send your shipping address as:\n"
            "street, [apartment,] city, state, postal code, country\n\n"
            "/cancel to abort."
        )
        return WAITING_ADDRESS

    @handles_errors
    async def handle_address(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Store the address and ask for a payment method"""
        context.user_data['checkout_address'] = parse_address_text(update.message.text)
        await update.message.reply_text(
            "💳 Choose a payment method:",
            reply_markup=self.keyboards.payment_methods()
        )
        return WAITING_PAYMENT_METHOD

    @handles_errors(on_error=ConversationHandler.END)
    async def handle_payment_method(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Place the order"""
        method = update.callback_query.data.split('_', 1)[1]
        address = context.user_data.pop('checkout_address', None)
        if address is None:
            await self.reply(update, "Checkout expired, please start again with /checkout.")
            return ConversationHandler.END

        result = await self.order_service.checkout(update.effective_user.id, address, method)
        await self.reply(
            update,
            f"✅ Order #{result['order_id']} placed.\n"
            f"💰 Total: {format_price(result['total'])}",
            self.keyboards.main_menu()
        )
        return ConversationHandler.END

    def conversation_handler(self) -> ConversationHandler:
        """Checkout conversation"""
        return ConversationHandler(
            entry_points=[
                CommandHandler('checkout', self.start_checkout),
                CallbackQueryHandler(self.start_checkout, pattern='^checkout$')
            ],
            states={
                WAITING_ADDRESS: [
                    MessageHandler(filters.TEXT & ~filters.COMMAND, self.handle_address)
                ],
                WAITING_PAYMENT_METHOD: [
                    CallbackQueryHandler(self.handle_payment_method, pattern='^pay_')
                ]
            },
            fallbacks=[
                CommandHandler('cancel', BaseHandler.cancel_conversation),
                CallbackQueryHandler(BaseHandler.cancel_conversation, pattern='^cancel$')
            ]
        )
