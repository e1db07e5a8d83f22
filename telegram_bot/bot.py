"""Main Telegram bot implementation."""

from contextlib import aclosing
from typing import Dict, Optional

from telegram import LinkPreviewOptions, Message, Update
from telegram.constants import ParseMode
from telegram.error import BadRequest
from telegram.ext import (
    Application,
    CallbackQueryHandler,
    CommandHandler,
    ContextTypes,
    MessageHandler,
    filters,
)

from config.settings import Settings
from news_service.client import NewsServiceClient
from orchestrator.intent_classifier import IntentClassifier
from orchestrator.news_chat import NewsChatOrchestrator
from orchestrator.responses import HELP_REPLY
from orchestrator.routing import Router
from orchestrator.session import ChatSession, ConnectivityState
from telegram_bot.formatters import ResponseFormatter
from telegram_bot.keyboards import (
    EXAMPLES,
    get_error_keyboard,
    get_help_keyboard,
    get_suggestions_keyboard,
)
from utils.logger import logger
from utils.scheduler import HealthMonitor


NO_PREVIEW = LinkPreviewOptions(is_disabled=True)


class NewsChatBot:
    """Telegram front-end for the news assistant, one chat session per chat."""

    def __init__(self, settings: Settings, client: Optional[NewsServiceClient] = None):
        """Initialize the bot."""
        self.settings = settings
        self.token = settings.TELEGRAM_BOT_TOKEN
        if not self.token:
            raise ValueError("Telegram bot token not provided")

        self.client = client or NewsServiceClient(settings)
        self.classifier = IntentClassifier()
        self.orchestrator = NewsChatOrchestrator(self.client, settings, classifier=self.classifier)
        self.connectivity = ConnectivityState()
        self.health_monitor = HealthMonitor(
            self.client,
            self.connectivity,
            interval=settings.HEALTH_CHECK_INTERVAL,
            timezone=settings.TIMEZONE,
        )
        self.formatter = ResponseFormatter()
        # Conversation history is kept in process memory only
        self.sessions: Dict[int, ChatSession] = {}
        self.application: Optional[Application] = None

    def run(self):
        """Start the bot."""
        application = (
            Application.builder()
            .token(self.token)
            .concurrent_updates(True)
            .post_init(self._on_startup)
            .post_shutdown(self._on_shutdown)
            .build()
        )
        self.application = application
        self._setup_handlers(application)

        logger.info("Starting News Chat Bot...")
        application.run_polling(allowed_updates=Update.ALL_TYPES)

    async def _on_startup(self, application: Application):
        self.health_monitor.start()

    async def _on_shutdown(self, application: Application):
        self.health_monitor.stop()
        await self.client.close()

    def _setup_handlers(self, application: Application):
        """Setup all command and message handlers."""
        application.add_handler(CommandHandler("start", self.cmd_start))
        application.add_handler(CommandHandler("help", self.cmd_help))
        application.add_handler(CommandHandler("status", self.cmd_status))
        application.add_handler(CommandHandler("reset", self.cmd_reset))

        # Callback query handler for inline buttons
        application.add_handler(CallbackQueryHandler(self.handle_callback))

        # Natural language message handler
        application.add_handler(MessageHandler(
            filters.TEXT & ~filters.COMMAND,
            self.handle_message
        ))

        # Error handler
        application.add_error_handler(self.error_handler)

    def get_session(self, chat_id: int) -> ChatSession:
        session = self.sessions.get(chat_id)
        if session is None:
            session = ChatSession(self.orchestrator, self.connectivity, timezone=self.settings.TIMEZONE)
            self.sessions[chat_id] = session
        return session

    async def cmd_start(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Handle /start command."""
        session = self.get_session(update.effective_chat.id)
        await update.message.reply_text(
            self.formatter.format_turn(session.turns[0]),
            parse_mode=ParseMode.HTML,
            reply_markup=get_suggestions_keyboard(session.suggested_questions),
        )

    async def cmd_help(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Handle /help command."""
        await update.effective_message.reply_text(
            self.formatter.format_reply(HELP_REPLY),
            parse_mode=ParseMode.HTML,
            reply_markup=get_help_keyboard(),
        )

    async def cmd_status(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Handle /status command."""
        await update.message.reply_text(
            self.formatter.format_status(self.connectivity, self.settings),
            parse_mode=ParseMode.HTML,
        )

    async def cmd_reset(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Clear the conversation for this chat."""
        session = self.get_session(update.effective_chat.id)
        if not session.reset():
            await update.message.reply_text("⏳ 正在处理上一条消息，请稍后再试。")
            return

        await update.message.reply_text(
            self.formatter.format_turn(session.turns[0]),
            parse_mode=ParseMode.HTML,
            reply_markup=get_suggestions_keyboard(session.suggested_questions),
        )

    async def handle_message(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Handle natural language messages."""
        await self._chat(update.message, update.effective_chat.id, update.message.text)

    async def handle_callback(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Handle inline button callbacks."""
        query = update.callback_query
        await query.answer()

        data = query.data or ""
        chat_id = update.effective_chat.id

        if data == "help":
            await self.cmd_help(update, context)
            return

        if data in EXAMPLES:
            await self._chat(query.message, chat_id, EXAMPLES[data])
            return

        if data.startswith("suggest_"):
            session = self.get_session(chat_id)
            try:
                question = session.suggested_questions[int(data.split("_", 1)[1])]
            except (ValueError, IndexError):
                logger.debug(f"Stale suggestion button: {data}")
                return
            await self._chat(query.message, chat_id, question)

    async def _chat(self, message: Message, chat_id: int, text: str):
        """Submit text to the chat session and render the reply."""
        session = self.get_session(chat_id)

        if session.busy:
            logger.debug(f"Chat {chat_id} busy, ignoring message")
            return

        if not self.connectivity.connected:
            await message.reply_text(self.formatter.format_offline(), parse_mode=ParseMode.HTML)
            return

        progress_msg = Router.get_progress_message(self.classifier.classify(text))
        sent = await message.reply_text(progress_msg)

        if self.settings.streaming:
            await self._chat_stream(sent, session, text)
            return

        turn = await session.submit(text)
        if turn is None:
            # Another message won the race for this session
            await sent.delete()
            return

        await sent.edit_text(
            self.formatter.format_turn(turn),
            parse_mode=ParseMode.HTML,
            reply_markup=get_suggestions_keyboard(session.suggested_questions),
            link_preview_options=NO_PREVIEW,
        )

    async def _chat_stream(self, sent: Message, session: ChatSession, text: str):
        """Render a streamed reply by editing the progress message as text arrives."""
        partial = ""
        rendered = 0

        async with aclosing(session.submit_stream(text)) as stream:
            async for element in stream:
                if element.done:
                    await sent.edit_text(
                        self.formatter.format_reply(element.content, element.articles),
                        parse_mode=ParseMode.HTML,
                        reply_markup=get_suggestions_keyboard(session.suggested_questions),
                        link_preview_options=NO_PREVIEW,
                    )
                    return

                partial += element.content
                if len(partial) - rendered >= self.settings.STREAM_EDIT_MIN_CHARS:
                    rendered = len(partial)
                    try:
                        await sent.edit_text(self.formatter.format_streaming(partial), parse_mode=ParseMode.HTML)
                    except BadRequest as e:
                        logger.debug(f"Skipped streaming edit: {e}")

        # The session refused the submission
        await sent.delete()

    async def error_handler(self, update: object, context: ContextTypes.DEFAULT_TYPE):
        """Handle errors."""
        logger.error(f"Update {update} caused error {context.error}")

        if isinstance(update, Update) and update.effective_message:
            await update.effective_message.reply_text(
                self.formatter.format_error("发生了意外错误，请稍后重试。"),
                parse_mode=ParseMode.HTML,
                reply_markup=get_error_keyboard()
            )
