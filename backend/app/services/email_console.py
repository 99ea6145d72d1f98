import logging
from typing import Any, Dict, List

logger = logging.getLogger(__name__)


class ConsoleEmailService:
    """Email transport used when no provider key is configured. Logs and keeps an outbox."""

    def __init__(self) -> None:
        self.outbox: List[Dict[str, Any]] = []

    def send_email(self, to_email: str, subject: str, html_content: str, text_content: str) -> Dict[str, Any]:
        message = {
            "to": to_email,
            "subject": subject,
            "html": html_content,
            "text": text_content,
        }
        self.outbox.append(message)
        # Bodies can carry one-time codes; only the envelope is logged
        logger.info(f"[console email] to={to_email} subject={subject!r}")
        return {"id": f"console-{len(self.outbox)}"}
