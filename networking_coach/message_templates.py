"""
Static message templates.

These are plain string patterns filled with the recipient's name, company
and the sender's purpose. No model is involved; rendering is instant and
works offline.
"""

from dataclasses import dataclass
from typing import Callable

from .models import MessageType


def _text_field(data: dict, key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"{key} must be a string")
    return value.strip()


@dataclass
class MessageData:
    """Form input describing who the message is for and why."""
    recipient_name: str
    company: str
    recipient_title: str = ""
    purpose: str = ""
    message_type: str = MessageType.LINKEDIN.value

    @classmethod
    def from_payload(cls, data: dict) -> "MessageData":
        """
        Build from a camelCase JSON payload.

        Raises:
            ValueError: If a field is present but not a string.
        """
        return cls(
            recipient_name=_text_field(data, "recipientName"),
            company=_text_field(data, "company"),
            recipient_title=_text_field(data, "recipientTitle"),
            purpose=_text_field(data, "purpose"),
            message_type=_text_field(data, "messageType") or MessageType.LINKEDIN.value,
        )

    def is_valid(self) -> bool:
        """A message needs at least a recipient name and a company."""
        return bool(self.recipient_name and self.company)


def _linkedin(data: MessageData) -> str:
    return (
        f"Hi {data.recipient_name},\n\n"
        f"I'm a student and came across your profile. I was impressed by your work at {data.company}. "
        f"{data.purpose}\n\n"
        "I'd love to connect and learn from your experience in the field.\n\n"
        "Best regards"
    )


def _informational(data: MessageData) -> str:
    return (
        "Subject: Informational Interview Request\n\n"
        f"Dear {data.recipient_name},\n\n"
        "I hope this email finds you well. I'm a student and discovered your profile through LinkedIn. "
        f"I was impressed by your career journey at {data.company}.\n\n"
        f"{data.purpose}\n\n"
        "I would be incredibly grateful for 15-20 minutes of your time to learn about your experience "
        "and gain insights into the industry. I'm particularly interested in understanding:\n\n"
        "• Your career path and key decisions\n"
        "• Advice for someone entering the field\n"
        "• Current trends and challenges in the industry\n\n"
        "I'm flexible with timing and happy to work around your schedule. Would a brief phone call "
        "or video chat be possible in the coming weeks?\n\n"
        "Thank you for considering my request. I understand you have a busy schedule and truly "
        "appreciate any time you can spare.\n\n"
        "Best regards"
    )


def _recruiter_followup(data: MessageData) -> str:
    return (
        "Subject: Following up on our conversation\n\n"
        f"Hi {data.recipient_name},\n\n"
        f"Thank you for taking the time to speak with me about opportunities at {data.company}. "
        f"{data.purpose}\n\n"
        "I wanted to follow up and reiterate my strong interest in joining your team. Based on our "
        "conversation, I'm even more excited about the possibility of contributing to "
        f"{data.company}'s mission.\n\n"
        "I've attached my updated resume and would be happy to provide any additional information "
        "you might need. Please let me know if there are any next steps I should be aware of.\n\n"
        "I look forward to hearing from you.\n\n"
        "Best regards"
    )


def _mentor_request(data: MessageData) -> str:
    return (
        "Subject: Mentorship Opportunity\n\n"
        f"Dear {data.recipient_name},\n\n"
        "I hope you're doing well. I'm a student and came across your profile. "
        f"I was inspired by your career achievements at {data.company}.\n\n"
        f"{data.purpose}\n\n"
        "I'm writing to inquire about the possibility of a mentoring relationship. I'm passionate "
        "about growing in this field and would greatly value guidance from someone with your "
        "experience and expertise.\n\n"
        "I understand that mentoring is a significant commitment, and I want to assure you that I would:\n\n"
        "• Come prepared to our conversations with specific questions\n"
        "• Respect your time and schedule\n"
        "• Take action on the advice you provide\n"
        "• Keep you updated on my progress\n\n"
        "Would you be open to a brief conversation to discuss this possibility? I'm happy to "
        "accommodate your schedule and preferred communication method.\n\n"
        "Thank you for considering this request.\n\n"
        "Respectfully"
    )


@dataclass(frozen=True)
class MessageTemplate:
    title: str
    description: str
    render: Callable[[MessageData], str]


MESSAGE_TEMPLATES: dict[str, MessageTemplate] = {
    MessageType.LINKEDIN.value: MessageTemplate(
        title="LinkedIn Connection Request",
        description="Professional connection request for LinkedIn",
        render=_linkedin,
    ),
    MessageType.INFORMATIONAL.value: MessageTemplate(
        title="Informational Interview Request",
        description="Request a brief informational interview",
        render=_informational,
    ),
    MessageType.RECRUITER_FOLLOWUP.value: MessageTemplate(
        title="Recruiter Follow-up",
        description="Follow up after meeting with a recruiter",
        render=_recruiter_followup,
    ),
    MessageType.MENTOR_REQUEST.value: MessageTemplate(
        title="Mentorship Request",
        description="Request ongoing mentorship relationship",
        render=_mentor_request,
    ),
}

# Short labels used when listing saved messages
MESSAGE_TYPE_LABELS: dict[str, str] = {
    MessageType.LINKEDIN.value: "LinkedIn",
    MessageType.INFORMATIONAL.value: "Informational",
    MessageType.RECRUITER_FOLLOWUP.value: "Recruiter Follow-up",
    MessageType.MENTOR_REQUEST.value: "Mentorship",
}

CONVERSATION_STARTERS: list[str] = [
    "I noticed you transitioned from [previous role] to [current role]. What motivated that change?",
    "What's the most rewarding aspect of working at [company]?",
    "What skills do you think are most important for someone entering this field?",
    "How do you stay current with industry trends and developments?",
    "What would you do differently if you were starting your career today?",
    "Can you tell me about a typical day in your role?",
    "What's the biggest challenge facing your industry right now?",
    "How did you build your network when you were starting out?",
]


def get_template(message_type: str) -> MessageTemplate:
    """Look up the template for a message type."""
    try:
        return MESSAGE_TEMPLATES[message_type]
    except KeyError:
        raise ValueError(f"Unknown message type: {message_type}") from None


def render_message(data: MessageData) -> str:
    """
    Fill the template for ``data.message_type`` with the form data.

    Raises:
        ValueError: unknown message type, or recipient name/company missing
    """
    template = get_template(data.message_type)
    if not data.is_valid():
        raise ValueError("Recipient name and company are required")
    return template.render(data)


def conversation_starters(limit: int = 6) -> list[str]:
    """Return the first ``limit`` conversation starters."""
    return CONVERSATION_STARTERS[:max(limit, 0)]
