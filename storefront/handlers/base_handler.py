# storefront/handlers/base_handler.py
import functools
import logging
from typing import Optional
from telegram import Update, InlineKeyboardMarkup
from telegram.ext import ContextTypes, ConversationHandler
from ..exceptions import ShopError, ValidationError
from ..services.auth_service import AuthService
from ..utils.keyboards import Keyboards
from ..utils.messages import Messages

logger = logging.getLogger(__name__)

def handles_errors(func=None, *, on_error=None):
    """Show ShopError messages to the user; log anything else.

    on_error is returned after a failure, e.g. ConversationHandler.END.
    """
    if func is None:
        return functools.partial(handles_errors, on_error=on_error)

    @functools.wraps(func)
    async def wrapper(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        try:
            return await func(self, update, context)
        except ShopError as e:
            await self.reply(update, f"❌ {e}")
        except Exception as e:
            logger.error(f"Error in {func.__qualname__}: {e}", exc_info=True)
            await self.reply(update, "❌ Something went wrong. Please try again.")
        return on_error
    return wrapper

class BaseHandler:
    """Base class for handlers"""
    def __init__(self, db):
        self.db = db
        self.auth = AuthService(db)
        self.keyboards = Keyboards()
        self.messages = Messages()

    async def reply(self, update: Update, text: str,
                    reply_markup: Optional[InlineKeyboardMarkup] = None):
        """Edit the message behind a button press, or answer a command"""
        query = update.callback_query
        if query:
            await query.answer()
            await query.edit_message_text(text, reply_markup=reply_markup)
        else:
            await update.effective_message.reply_text(text, reply_markup=reply_markup)

    @staticmethod
    async def cancel_conversation(update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Abort the current conversation"""
        context.user_data.clear()
        if update.callback_query:
            await update.callback_query.answer()
            await update.callback_query.edit_message_text("❌ Cancelled.")
        else:
            await update.message.reply_text("❌ Cancelled.")
        return ConversationHandler.END

    async def is_admin(self, user_id: int) -> bool:
        """Admin check against the stored role"""
        return await self.auth.is_admin(user_id)

    @staticmethod
    def int_arg(context: ContextTypes.DEFAULT_TYPE, index: int, default: Optional[int] = None) -> Optional[int]:
        """Integer command argument, or default when absent"""
        args = context.args or []
        if len(args) <= index:
            return default
        try:
            return int(args[index])
        except ValueError:
            raise ValidationError(f"Expected a number, got: {args[index]}")

    @staticmethod
    def callback_id(update: Update) -> int:
        """Trailing numeric id of callback data such as product_12"""
        return int(update.callback_query.data.rsplit('_', 1)[1])
