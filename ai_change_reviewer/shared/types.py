from typing import List, NotRequired, TypedDict


class ChangedFileDict(TypedDict, total=False):
    """Changed file entry accepted by the HTTP surface."""

    path: str
    before_text: str | None
    after_text: str | None


class ChatMessageDict(TypedDict):
    """Single chat message payload."""

    role: str
    content: str


class ChatCompletionPayload(TypedDict):
    """Request body sent to a chat-completions endpoint."""

    model: str
    temperature: float
    messages: List[ChatMessageDict]


class ReviewResponseDict(TypedDict, total=False):
    """JSON body returned by the review route."""

    status: str
    summary: str
    review: NotRequired[str]
    report_path: NotRequired[str]
    html_report_path: NotRequired[str]
    error: NotRequired[str]
