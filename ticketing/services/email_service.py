import re, ssl, smtplib
from email.message import EmailMessage
from email.utils import make_msgid
from typing import Optional

from ..errors import NotificationFailed
from ..logging_config import get_logger
from .qr_service import decode_data_uri

logger = get_logger("ticketing.email")

INLINE_CID = "ticketqr"
INLINE_IMG = f'<img src="cid:{INLINE_CID}" alt="QR Code" style="width:250px"/>'
_IMG_TAG = re.compile(r'<img src="[^"]*"[^>]*>')
_TAG = re.compile(r"<[^>]+>")


def inline_image_html(html: str) -> str:
    """Point the first <img> at the inline attachment instead of a data URI."""
    return _IMG_TAG.sub(INLINE_IMG, html, count=1)


def html_to_text(html: str) -> str:
    lines = (line.strip() for line in _TAG.sub("", html).splitlines())
    return "\n".join(line for line in lines if line)


class SMTPNotifier:
    """Sends HTML email through an SMTP server using STARTTLS."""

    def __init__(
        self,
        server: str,
        port: int,
        username: Optional[str],
        password: Optional[str],
        sender_name: str = "Tech Event Team",
        timeout: float = 30,
    ):
        self.server = server
        self.port = port
        self.username = username
        self.password = password
        self.sender_name = sender_name
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings) -> "SMTPNotifier":
        return cls(
            settings.smtp_server,
            settings.smtp_port,
            settings.smtp_email,
            settings.smtp_password,
            sender_name=settings.sender_name,
        )

    @property
    def configured(self) -> bool:
        return bool(self.username and self.password)

    def build_message(self, to_email: str, subject: str, html: str, inline_image: Optional[str] = None) -> EmailMessage:
        msg = EmailMessage()
        msg["From"] = f"{self.sender_name} <{self.username}>"
        msg["To"] = to_email
        msg["Subject"] = subject
        msg["Message-ID"] = make_msgid(domain=(self.username or "localhost").rpartition("@")[2] or None)

        image = None
        if inline_image:
            mime, image = decode_data_uri(inline_image)
            html = inline_image_html(html)

        msg.set_content(html_to_text(html))
        msg.add_alternative(html, subtype="html")

        if image is not None:
            maintype, _, subtype = mime.partition("/")
            html_part = msg.get_payload()[1]
            html_part.add_related(
                image,
                maintype=maintype,
                subtype=subtype or "png",
                cid=f"<{INLINE_CID}>",
                disposition="inline",
                filename="ticket.png",
            )
        return msg

    def send(self, to_email: str, subject: str, html: str, inline_image: Optional[str] = None) -> str:
        """Send the message and return its Message-ID.

        Raises NotificationFailed on any transport or encoding error.
        """
        if not self.configured:
            raise NotificationFailed("SMTP credentials are not configured")
        try:
            msg = self.build_message(to_email, subject, html, inline_image)
            ctx = ssl.create_default_context()
            with smtplib.SMTP(self.server, self.port, timeout=self.timeout) as server:
                server.starttls(context=ctx)
                server.login(self.username, self.password)
                server.send_message(msg)
        except (smtplib.SMTPException, OSError, ValueError) as e:
            logger.error("Failed to send email", extra={"to": to_email, "error": str(e)})
            raise NotificationFailed() from e

        logger.info("Email sent", extra={"to": to_email, "message_id": msg["Message-ID"]})
        return msg["Message-ID"]
