"""
botsuite/api/bot.py

Purpose: Bot endpoint

- Accepts multipart text / chartType / file
- Requires an authenticated session
- Hands the request to the bot pipeline
"""

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile

from botsuite.api.deps import SessionContext, require_session
from botsuite.core.logging import get_logger, LogContext
from botsuite.schemas.bot import BotReply
from botsuite.services.bot_service import BotService, get_bot_service
from botsuite.utils.text_utils import clean_field

logger = get_logger(__name__)
router = APIRouter()


@router.post("/bot/{bot_id}", response_model=BotReply)
async def bot_request(
    bot_id: str,
    session: SessionContext = Depends(require_session),
    text: Optional[str] = Form(None),
    chart_type: Optional[str] = Form(None, alias="chartType"),
    file: Optional[UploadFile] = File(None),
    bot_service: BotService = Depends(get_bot_service),
):
    """
    Runs a bot request and returns {text, image, fileUrl, raw}.

    Errors: 401 without session, 400 rejected upload, 501 unconfigured bot,
    upstream status relayed on API failure, 500 otherwise.
    """
    with LogContext(uid=session.uid, bot_id=bot_id):
        logger.info(f"Bot request (file={'yes' if file and file.filename else 'no'})")
        return await bot_service.handle(
            bot_id,
            user_text=text or "",
            chart_type=clean_field(chart_type),
            upload=file,
        )
