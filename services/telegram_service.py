from telegram import BotCommand, Update
from telegram.constants import ChatMemberStatus, ChatType, ParseMode
from telegram.ext import ApplicationBuilder, CommandHandler, ContextTypes
import logging

from core import notifications
from database.config_store import InvalidThresholdError

logger = logging.getLogger(__name__)

BOT_COMMANDS = [
    BotCommand("status", "Show the latest temperature and humidity"),
    BotCommand("setlogchannel", "Use this chat for the sensor log (admin)"),
    BotCommand("setalertchannel", "Use this chat for high temperature alerts (admin)"),
    BotCommand("setthreshold", "Set the alert temperature in °C (admin)"),
]

ADMIN_STATUSES = (ChatMemberStatus.ADMINISTRATOR, ChatMemberStatus.OWNER)


def render_notification(notification):
    """Render a Notification as Telegram Markdown text"""
    lines = [f"*{notification.title}*"]
    if notification.description:
        lines += ["", notification.description]
    if notification.fields:
        lines.append("")
        lines += [f"{f.name}: *{f.value}*" for f in notification.fields]
    if notification.footer:
        lines += ["", f"🕒 {notification.footer}"]
    return "\n".join(lines)


class TelegramService:
    """Class untuk mengelola bot Telegram: command handler dan pengiriman notifikasi."""

    def __init__(self, config, config_store, status_provider, on_startup=None, on_shutdown=None):
        self.config = config
        self.config_store = config_store
        self.status_provider = status_provider
        self.on_startup = on_startup
        self.on_shutdown = on_shutdown
        self.application = (
            ApplicationBuilder()
            .token(self.config.TELEGRAM_TOKEN)
            .post_init(self._post_init)
            .post_shutdown(self._post_shutdown)
            .build()
        )
        self._setup_handlers()

    def _setup_handlers(self):
        self.application.add_handler(CommandHandler("status", self.status))
        self.application.add_handler(CommandHandler("setlogchannel", self.set_log_channel))
        self.application.add_handler(CommandHandler("setalertchannel", self.set_alert_channel))
        self.application.add_handler(CommandHandler("setthreshold", self.set_threshold))

    async def _post_init(self, application):
        try:
            logger.info("Registering bot commands...")
            await application.bot.set_my_commands(BOT_COMMANDS)
            logger.info("Bot commands registered")
        except Exception as e:
            logger.error(f"Failed to register bot commands: {e}")

        if self.on_startup:
            self.on_startup()

    async def _post_shutdown(self, application):
        if self.on_shutdown:
            self.on_shutdown()

    # === Notification sink ===
    def send(self, chat_id, notification):
        """Fire-and-forget: schedule the send on the bot's event loop"""
        self.application.create_task(self._send_message_async(chat_id, render_notification(notification)))

    async def _send_message_async(self, chat_id, text):
        try:
            await self.application.bot.send_message(chat_id=chat_id, text=text, parse_mode=ParseMode.MARKDOWN)
            logger.info(f"Pesan Telegram berhasil dikirim ke {chat_id}.")
        except Exception as e:
            logger.error(f"Gagal mengirim pesan ke {chat_id}: {e}")

    # === Commands ===
    async def _is_admin(self, update, context):
        user = update.effective_user
        chat = update.effective_chat
        if user is None or chat is None:
            return False
        if user.id in self.config.ADMIN_USER_IDS:
            return True
        if chat.type == ChatType.PRIVATE:
            return False

        try:
            member = await context.bot.get_chat_member(chat.id, user.id)
        except Exception as e:
            logger.error(f"Cannot check admin status of {user.id} in {chat.id}: {e}")
            return False
        return member.status in ADMIN_STATUSES

    async def _require_admin(self, update, context):
        if await self._is_admin(update, context):
            return True
        await update.effective_message.reply_text("⛔ Only administrators can use this command.")
        logger.warning(f"Rejected admin command from user {update.effective_user and update.effective_user.id}")
        return False

    async def status(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        snapshot = self.status_provider()
        if snapshot is None:
            await update.effective_message.reply_text("❌ No data received from the ESP32 yet")
            return

        text = render_notification(notifications.status_report(snapshot))
        await update.effective_message.reply_text(text, parse_mode=ParseMode.MARKDOWN)

    async def set_log_channel(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        if not await self._require_admin(update, context):
            return
        chat_id = update.effective_chat.id
        self.config_store.set_log_channel(chat_id)
        await update.effective_message.reply_text(f"✅ This chat ({chat_id}) is now the *log* chat", parse_mode=ParseMode.MARKDOWN)

    async def set_alert_channel(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        if not await self._require_admin(update, context):
            return
        chat_id = update.effective_chat.id
        self.config_store.set_alert_channel(chat_id)
        await update.effective_message.reply_text(f"✅ This chat ({chat_id}) is now the *alert* chat", parse_mode=ParseMode.MARKDOWN)

    async def set_threshold(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        if not await self._require_admin(update, context):
            return

        args = context.args or []
        try:
            temperature = int(args[0])
        except (IndexError, ValueError):
            await update.effective_message.reply_text("Usage: /setthreshold <temperature °C, integer>")
            return

        try:
            self.config_store.set_threshold(temperature)
        except InvalidThresholdError as e:
            await update.effective_message.reply_text(f"❌ {e}")
            return

        await update.effective_message.reply_text(f"✅ Temperature alert set to *{temperature}°C*", parse_mode=ParseMode.MARKDOWN)

    def start_polling(self):
        self.application.run_polling(allowed_updates=Update.ALL_TYPES)
