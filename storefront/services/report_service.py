# storefront/services/report_service.py
from typing import Dict, Any
from datetime import date, datetime, timedelta
import pytz
from decimal import Decimal
from ..config import Config
from ..exceptions import ValidationError
from .auth_service import AuthService

class ReportService:
    """Sales reporting for admins"""

    def __init__(self, db):
        self.db = db
        self.auth = AuthService(db)
        self.tz = pytz.timezone(Config.TIMEZONE)

    async def get_daily_report(self, actor_id: int) -> Dict[str, Any]:
        """Today's report"""
        today = datetime.now(self.tz).date()
        return await self.get_daily_metrics(actor_id, today, today)

    async def get_weekly_report(self, actor_id: int) -> Dict[str, Any]:
        """Last seven days"""
        today = datetime.now(self.tz).date()
        return await self.get_daily_metrics(actor_id, today - timedelta(days=6), today)

    async def get_monthly_report(self, actor_id: int) -> Dict[str, Any]:
        """Month to date"""
        today = datetime.now(self.tz).date()
        return await self.get_daily_metrics(actor_id, today.replace(day=1), today)

    async def get_daily_metrics(self, actor_id: int, start_date: date, end_date: date) -> Dict[str, Any]:
        """Per-day orders and revenue, top products and status mix for [start_date, end_date].

        Days are bucketed in the configured timezone.
        """
        await self.auth.require_admin(actor_id, "view reports")
        if isinstance(start_date, datetime):
            start_date = start_date.date()
        if isinstance(end_date, datetime):
            end_date = end_date.date()
        if start_date > end_date:
            raise ValidationError("Report start date must not be after end date")

        tz_name = self.tz.zone
        async with self.db.pool.acquire() as conn:
            daily_rows = await conn.fetch("""
                SELECT
                    DATE(created_at AT TIME ZONE $3) as day,
                    COUNT(*) as order_count,
                    SUM(total) as total_revenue
                FROM orders
                WHERE DATE(created_at AT TIME ZONE $3) BETWEEN $1 AND $2
                GROUP BY day
                ORDER BY day
            """, start_date, end_date, tz_name)

            top_products = await conn.fetch("""
                SELECT
                    p.product_id,
                    p.name,
                    p.price,
                    p.image_url,
                    SUM(oi.quantity) as total_quantity
                FROM order_items oi
                JOIN orders o ON o.order_id = oi.order_id
                JOIN products p ON p.product_id = oi.product_id
                WHERE DATE(o.created_at AT TIME ZONE $3) BETWEEN $1 AND $2
                GROUP BY p.product_id, p.name, p.price, p.image_url
                ORDER BY total_quantity DESC
                LIMIT 5
            """, start_date, end_date, tz_name)

            status_rows = await conn.fetch("""
                SELECT status, COUNT(*) as count
                FROM orders
                WHERE DATE(created_at AT TIME ZONE $3) BETWEEN $1 AND $2
                GROUP BY status
                ORDER BY status
            """, start_date, end_date, tz_name)

        daily_metrics = [
            {
                "date": row['day'].strftime("%Y-%m-%d"),
                "order_count": row['order_count'],
                "total_revenue": row['total_revenue'] or Decimal(0)
            }
            for row in daily_rows
        ]

        return {
            "period": {
                "start": start_date.strftime("%Y-%m-%d"),
                "end": end_date.strftime("%Y-%m-%d")
            },
            "daily_metrics": daily_metrics,
            "top_products": [dict(p) for p in top_products],
            "order_status_distribution": [
                {"status": row['status'], "count": row['count']} for row in status_rows
            ],
            "summary": {
                "total_orders": sum(m['order_count'] for m in daily_metrics),
                "total_revenue": sum((m['total_revenue'] for m in daily_metrics), Decimal(0))
            }
        }

    async def generate_excel_report(self, actor_id: int, start_date: date, end_date: date) -> bytes:
        """Excel workbook of the report, one sheet per section"""
        import pandas as pd
        import io

        report_data = await self.get_daily_metrics(actor_id, start_date, end_date)

        output = io.BytesIO()
        with pd.ExcelWriter(output, engine='xlsxwriter') as writer:
            summary_data = {
                'metric': ['Total orders', 'Total revenue', 'Period start', 'Period end'],
                'value': [
                    report_data['summary']['total_orders'],
                    float(report_data['summary']['total_revenue']),
                    report_data['period']['start'],
                    report_data['period']['end']
                ]
            }
            pd.DataFrame(summary_data).to_excel(writer, sheet_name='Summary', index=False)

            daily_df = pd.DataFrame(report_data['daily_metrics'])
            daily_df.to_excel(writer, sheet_name='Daily', index=False)

            top_products_df = pd.DataFrame(report_data['top_products'])
            top_products_df.to_excel(writer, sheet_name='Top products', index=False)

            status_df = pd.DataFrame(report_data['order_status_distribution'])
            status_df.to_excel(writer, sheet_name='Statuses', index=False)

        return output.getvalue()
