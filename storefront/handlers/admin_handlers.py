# storefront/handlers/admin_handlers.py
import io
from datetime import datetime, timedelta
import pytz
from telegram import Update
from telegram.ext import ContextTypes
from .base_handler import BaseHandler, handles_errors
from ..config import Config
from ..exceptions import ValidationError
from ..services.campaign_service import CampaignService
from ..services.order_service import OrderService
from ..services.report_service import ReportService
from ..services.user_service import UserService
from ..utils.formatters import format_price
from ..utils.parsers import parse_campaign_text

CAMPAIGN_ACTIONS = ('activate', 'pause', 'resume', 'end')

REPORT_PERIODS = {
    'today': 'get_daily_report',
    'week': 'get_weekly_report',
    'month': 'get_monthly_report',
}

NEW_CAMPAIGN_HELP = (
    "Usage: /newcampaign key=value; key=value ...\n"
    "Keys: name, description, type, status, start, end, all, value, max, "
    "buy, get, flat, min_order, max_usage, products, categories\n"
    "Example: /newcampaign name=Summer; type=PERCENTAGE_DISCOUNT; value=20; "
    "start=2026-06-01; end=2026-06-30; categories=3,4"
)

class AdminHandler(BaseHandler):
    """Admin commands; every service call re-checks the caller's role"""

    def __init__(self, db):
        super().__init__(db)
        self.campaign_service = CampaignService(db)
        self.order_service = OrderService(db)
        self.user_service = UserService(db)
        self.report_service = ReportService(db)

    async def admin_panel(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Show the admin panel"""
        if not await self.is_admin(update.effective_user.id):
            await self.reply(update, "⛔️ You do not have access to this section.")
            return

        await self.reply(
            update,
            "🔧 Admin panel\nChoose a section:",
            self.keyboards.admin_menu()
        )

    @handles_errors
    async def list_campaigns(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """/campaigns [page] or admin_campaigns_<page>"""
        if not await self.is_admin(update.effective_user.id):
            await self.reply(update, "⛔️ You do not have access to this section.")
            return
        page = self.callback_id(update) if update.callback_query else self.int_arg(context, 0, 1)

        result = await self.campaign_service.get_paginated(page)
        if not result['campaigns']:
            text = "🎫 No campaigns yet. Create one with /newcampaign."
        else:
            text = f"🎫 Campaigns (page {result['page']}/{result['total_pages']}):\n\n"
            text += "\n".join(self.messages.format_campaign(c) for c in result['campaigns'])
        await self.reply(
            update,
            text,
            self.keyboards.page_menu("admin_campaigns", result['page'], result['total_pages'])
        )

    @handles_errors
    async def campaign_command(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """/campaign <id> [activate|pause|resume|end]"""
        campaign_id = self.int_arg(context, 0)
        if campaign_id is None:
            await update.message.reply_text(
                "Usage: /campaign <id> [activate|pause|resume|end]"
            )
            return

        args = context.args or []
        if len(args) > 1:
            action = args[1].lower()
            if action not in CAMPAIGN_ACTIONS:
                raise ValidationError(f"Unknown action: {action}")
            campaign = await getattr(self.campaign_service, action)(update.effective_user.id, campaign_id)
        else:
            if not await self.is_admin(update.effective_user.id):
                await self.reply(update, "⛔️ You do not have access to this section.")
                return
            campaign = await self.campaign_service.get_campaign(campaign_id)

        await self.reply(
            update,
            self.messages.format_campaign(campaign),
            self.keyboards.campaign_menu(campaign)
        )

    @handles_errors
    async def campaign_button(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """campaign_<action>_<id> buttons"""
        _, action, campaign_id = update.callback_query.data.split('_')
        if action not in CAMPAIGN_ACTIONS:
            raise ValidationError(f"Unknown action: {action}")

        campaign = await getattr(self.campaign_service, action)(
            update.effective_user.id, int(campaign_id)
        )
        await self.reply(
            update,
            "✅ Updated\n\n" + self.messages.format_campaign(campaign),
            self.keyboards.campaign_menu(campaign)
        )

    @handles_errors
    async def new_campaign(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """/newcampaign key=value; ..."""
        text = update.message.text.partition(' ')[2].strip()
        if not text:
            await update.message.reply_text(NEW_CAMPAIGN_HELP)
            return

        campaign_id = await self.campaign_service.create_campaign(
            update.effective_user.id,
            parse_campaign_text(text)
        )
        campaign = await self.campaign_service.get_campaign(campaign_id)
        await update.message.reply_text(
            "✅ Campaign created\n\n" + self.messages.format_campaign(campaign),
            reply_markup=self.keyboards.campaign_menu(campaign)
        )

    @handles_errors
    async def list_orders(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """/adminorders [page] or admin_orders_<page>"""
        page = self.callback_id(update) if update.callback_query else self.int_arg(context, 0, 1)
        result = await self.order_service.get_paginated(update.effective_user.id, page)

        if not result['orders']:
            text = "📦 No orders yet."
        else:
            text = f"📦 Orders (page {result['page']}/{result['total_pages']}):\n\n"
            for order in result['orders']:
                text += (
                    f"#{order['order_id']} @{order.get('username') or order['user_id']} "
                    f"{format_price(order['total'])} {order['status']}\n"
                )
        await self.reply(
            update,
            text,
            self.keyboards.page_menu("admin_orders", result['page'], result['total_pages'])
        )

    @handles_errors
    async def set_order_status(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """/setorderstatus <id> <status>"""
        args = context.args or []
        if len(args) != 2:
            await update.message.reply_text("Usage: /setorderstatus <order id> <status>")
            return

        result = await self.order_service.update_order_status(
            update.effective_user.id, self.int_arg(context, 0), args[1].upper()
        )
        await update.message.reply_text(
            f"✅ Order #{result['order_id']} is now {result['status']}"
        )

    @handles_errors
    async def list_users(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """/users [page] or admin_users_<page>"""
        page = self.callback_id(update) if update.callback_query else self.int_arg(context, 0, 1)
        result = await self.user_service.get_paginated(update.effective_user.id, page)

        text = f"👥 Users (page {result['page']}/{max(result['total_pages'], 1)}):\n\n"
        for user in result['users']:
            text += (
                f"{user['user_id']} @{user.get('username') or '-'} "
                f"[{user['role']}] orders: {user['order_count']}\n"
            )
        await self.reply(
            update,
            text,
            self.keyboards.page_menu("admin_users", result['page'], result['total_pages'])
        )

    @handles_errors
    async def set_role(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """/setrole <user id> <user|admin>"""
        args = context.args or []
        if len(args) != 2:
            await update.message.reply_text("Usage: /setrole <user id> <user|admin>")
            return

        user = await self.user_service.update_role(
            update.effective_user.id, self.int_arg(context, 0), args[1].lower()
        )
        await update.message.reply_text(f"✅ User {user['user_id']} is now {user['role']}")

    def _report_range(self, days: int):
        if days < 1:
            raise ValidationError("Days must be at least 1")
        today = datetime.now(pytz.timezone(Config.TIMEZONE)).date()
        return today - timedelta(days=days - 1), today

    @handles_errors
    async def report(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """/report [today|week|month|days] or admin_report_<period>"""
        if update.callback_query:
            period = update.callback_query.data.rsplit('_', 1)[1]
        else:
            period = (context.args or ['week'])[0].lower()

        user_id = update.effective_user.id
        if period in REPORT_PERIODS:
            report = await getattr(self.report_service, REPORT_PERIODS[period])(user_id)
        elif period.isdigit():
            start_date, end_date = self._report_range(int(period))
            report = await self.report_service.get_daily_metrics(user_id, start_date, end_date)
        else:
            raise ValidationError("Usage: /report [today|week|month|days]")

        await self.reply(
            update,
            self.messages.format_report(report),
            self.keyboards.page_menu("admin_report", 1, 1)
        )

    @handles_errors
    async def export_report(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """/exportreport [days]: send the report as an Excel file"""
        start_date, end_date = self._report_range(self.int_arg(context, 0, 30))
        content = await self.report_service.generate_excel_report(
            update.effective_user.id, start_date, end_date
        )
        await update.message.reply_document(
            document=io.BytesIO(content),
            filename=f"report_{start_date:%Y%m%d}_{end_date:%Y%m%d}.xlsx"
        )
