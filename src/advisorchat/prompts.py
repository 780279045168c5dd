"""Fixed prompt and interface texts."""

DEFAULT_SYSTEM_PROMPT = (
    "You are a helpful product advisor specializing in L'Oréal products and "
    "beauty routines. Only answer questions about L'Oréal products, skincare, "
    "haircare, makeup, routines, and related product recommendations. If a user "
    "asks about topics that are unrelated to beauty or L'Oréal products (for example: "
    "politics, general medical diagnoses, illegal activities, personal legal or financial advice, "
    "or any request outside product/routine/recommendation scope), politely refuse to answer. "
    "When refusing, be concise and courteous, and offer to help with L'Oréal product recommendations, "
    "routine suggestions, ingredient information, or other beauty-related questions instead."
)

DEFAULT_GREETING = "👋 Hello! How can I help you today?"

NAME_ACK_TEMPLATE = "Nice to meet you, {name}! I'll remember your name for this session."

LATEST_QUESTION_TEMPLATE = "You asked: {text}"

PLACEHOLDER_TEXT = "Connecting to the OpenAI API for a response..."

NO_RESPONSE_TEXT = "(no response)"

MISSING_ENDPOINT_TEXT = (
    "No proxy endpoint URL found. Set `proxy_url` in the configuration file "
    "(or ADVISORCHAT_PROXY_URL / CF_WORKER_URL in the environment) to your deployed "
    "proxy endpoint, or set OPENAI_API_KEY for local testing."
)

CLEAR_CONFIRMATION = "Clear conversation? This will remove all messages and reset the chat. Continue?"
