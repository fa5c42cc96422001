# orders/management/commands/send_test_email.py

from django.core.management.base import BaseCommand, CommandError

from orders.notifications.dispatcher import OrderNotifier


class Command(BaseCommand):
    help = "Send a test message through the configured email provider to ADMIN_EMAIL."

    def handle(self, *args, **options):
        result = OrderNotifier.from_settings().test_email_service()
        if not result.success:
            raise CommandError(f"{result.message}: {result.error}")
        self.stdout.write(self.style.SUCCESS(result.message))
