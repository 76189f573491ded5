"""
botsuite/services/bot_service.py

Purpose: Bot request pipeline

- Checks the bot is configured before doing any work
- Stages the upload, extracts its content, copies it to the object store
- Assembles the prompt and calls the generative API
- Normalizes the reply into {text, image, fileUrl, raw}
"""

from typing import Dict, Optional

from fastapi import UploadFile
from starlette.concurrency import run_in_threadpool

from botsuite.core.config import settings, BotConfig
from botsuite.core.exceptions import BotSuiteError, BotRequestError, NotConfiguredError
from botsuite.core.logging import get_logger
from botsuite.schemas.bot import BotReply
from botsuite.services.extraction_service import extract_file
from botsuite.services.gemini_service import GeminiClient, get_gemini_client, normalize_response
from botsuite.services.prompt_service import (
    build_system_instruction,
    build_user_parts,
    build_generation_config,
    build_request_body,
)
from botsuite.services.upload_service import ObjectUploader, get_object_uploader, stage_upload
from botsuite.utils.constants import MSG_BOT_NOT_CONFIGURED, MSG_BOT_REQUEST_FAILED

logger = get_logger(__name__)


class BotService:
    """
    Runs one bot request end to end. Holds no per-request state.
    """

    def __init__(
        self,
        bots: Dict[str, BotConfig],
        client: GeminiClient,
        uploader: ObjectUploader,
        upload_dir: str,
        max_upload_bytes: int,
        text_limit: int,
    ):
        self.bots = bots
        self.client = client
        self.uploader = uploader
        self.upload_dir = upload_dir
        self.max_upload_bytes = max_upload_bytes
        self.text_limit = text_limit

    def get_bot(self, bot_id: str) -> BotConfig:
        """
        Raises:
            NotConfiguredError: No model/key for this bot
        """
        bot = self.bots.get(bot_id)
        if bot is None:
            logger.warning(f"Bot '{bot_id}' requested but not configured")
            raise NotConfiguredError(MSG_BOT_NOT_CONFIGURED)
        return bot

    async def handle(
        self,
        bot_id: str,
        user_text: str = "",
        chart_type: str = "",
        upload: Optional[UploadFile] = None,
    ) -> BotReply:
        """
        Handles a bot request.

        Raises:
            NotConfiguredError: 501, before any file or network work
            ValidationError: 400, rejected upload
            UpstreamError: API non-success status, relayed
            BotRequestError: 500, any other failure
        """
        bot = self.get_bot(bot_id)

        async with stage_upload(upload, self.upload_dir, self.max_upload_bytes) as staged:
            try:
                extraction = await run_in_threadpool(extract_file, staged, self.text_limit)
                file_url = await self.uploader.upload(staged)

                body = build_request_body(
                    build_system_instruction(bot_id, chart_type),
                    build_user_parts(user_text, extraction),
                    build_generation_config(bot_id),
                )

                logger.info(
                    f"Calling model {bot.model} with {len(body['contents'][0]['parts'])} part(s)"
                )
                data = await self.client.generate(bot, body)
                text, image = normalize_response(data)

            except BotSuiteError:
                raise
            except Exception as e:
                logger.error(f"Bot request failed: {e}", exc_info=True)
                raise BotRequestError(MSG_BOT_REQUEST_FAILED) from e

        return BotReply(text=text, image=image, file_url=file_url, raw=data)


# Global bot service instance
_bot_service: Optional[BotService] = None


def get_bot_service() -> BotService:
    """Get or create the global bot service."""
    global _bot_service
    if _bot_service is None:
        _bot_service = BotService(
            bots=settings.bots,
            client=get_gemini_client(),
            uploader=get_object_uploader(),
            upload_dir=settings.UPLOAD_DIR,
            max_upload_bytes=settings.MAX_UPLOAD_BYTES,
            text_limit=settings.EXTRACT_TEXT_LIMIT,
        )
    return _bot_service


def reset_bot_service():
    global _bot_service
    _bot_service = None
