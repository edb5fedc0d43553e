"""
Prompt components for message generation.

One system prompt per message type, plus the user prompt assembled from
the form fields.
"""

from .message_templates import MessageData
from .models import MessageType

SYSTEM_PROMPTS: dict[str, str] = {
    MessageType.LINKEDIN.value: (
        "You are an expert at writing professional LinkedIn connection requests. "
        "Create concise, personalized messages that are warm but professional. "
        "Keep them under 300 characters (LinkedIn's limit). "
        "Focus on genuine interest and specific reasons for connecting."
    ),
    MessageType.INFORMATIONAL.value: (
        "You are an expert at writing professional informational interview requests. "
        "Create thoughtful, respectful emails that show genuine interest in learning. "
        "Include specific questions about their career journey and industry insights. "
        "Be humble and acknowledge their valuable time."
    ),
    MessageType.RECRUITER_FOLLOWUP.value: (
        "You are an expert at writing professional recruiter follow-up messages. "
        "Create engaging follow-ups that reiterate interest, highlight relevant qualifications, "
        "and maintain momentum in the conversation. Be enthusiastic but not pushy."
    ),
    MessageType.MENTOR_REQUEST.value: (
        "You are an expert at writing mentorship request messages. "
        "Create thoughtful, respectful requests that demonstrate genuine commitment to learning "
        "and growth. Show appreciation for their expertise and be specific about what kind of "
        "guidance you're seeking."
    ),
}

LINKEDIN_CHAR_LIMIT = 300


def build_user_prompt(data: MessageData) -> str:
    """Assemble the user prompt; title and purpose lines only appear when given."""
    is_linkedin = data.message_type == MessageType.LINKEDIN.value
    kind = "LinkedIn connection request" if is_linkedin else "professional email"

    prompt = (
        f"Please write a {kind} with the following details:\n\n"
        f"- Message type: {data.message_type}\n"
        f"- Recipient's name: {data.recipient_name}\n"
        f"- Company: {data.company}"
    )

    if data.recipient_title:
        prompt += f"\n- Recipient's title: {data.recipient_title}"

    if data.purpose:
        prompt += f"\n- Purpose/context: {data.purpose}"

    if is_linkedin:
        last_rule = f"- Under {LINKEDIN_CHAR_LIMIT} characters for LinkedIn"
    else:
        last_rule = "- Include a clear subject line if it's an email"

    prompt += (
        "\n\nPlease make this message:\n"
        "- Personalized and genuine\n"
        "- Professional but approachable\n"
        "- Specific to their role and company\n"
        "- Concise and well-structured\n"
        f"{last_rule}\n\n"
        "Generate ONLY the message content, no additional explanations or formatting."
    )
    return prompt
