APP_NAME = "Smart Reply Chat API"
APP_VERSION = "1.0.0"
DEFAULT_CORS_ALLOW_ORIGINS = [
	"http://localhost",
	"http://127.0.0.1",
	"http://localhost:3000",
]
DEFAULT_TRUSTED_HOSTS = [
	"127.0.0.1",
	"localhost",
	"testserver",
]

API_KEY_ENV = "SYNTHETIC_API_KEY"
BASE_URL_ENV = "SMART_REPLY_BASE_URL"
MODEL_ENV = "SMART_REPLY_MODEL"
TIMEOUT_ENV = "SMART_REPLY_TIMEOUT_S"
LOG_LEVEL_ENV = "LOG_LEVEL"

DEFAULT_INFERENCE_BASE_URL = "https://api.synthetic.new/openai/v1"
DEFAULT_INFERENCE_MODEL = "hf:meta-llama/Llama-3.3-70B-Instruct"
DEFAULT_INFERENCE_TIMEOUT_S = 8.0
DEFAULT_LOG_LEVEL = "INFO"

INFERENCE_TEMPERATURE = 0.7
INFERENCE_MAX_TOKENS = 200
CONTEXT_WINDOW_MESSAGES = 10
MAX_SMART_REPLIES = 3
