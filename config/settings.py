import os

from dotenv import load_dotenv

load_dotenv()

# storage backend: memory | local | db | kv
BLOB_BACKEND = os.getenv('BLOB_BACKEND', 'local')
LOCAL_STORAGE_PATH = os.getenv('LOCAL_STORAGE_PATH', os.path.join(os.getcwd(), '.blobs'))
DATABASE_URL = os.getenv('DATABASE_URL', f"sqlite://{os.path.join(os.getcwd(), 'blobs.sqlite3')}")

# Workers KV REST API
KV_API_BASE = os.getenv('KV_API_BASE', 'https://api.cloudflare.com/client/v4')
KV_ACCOUNT_ID = os.getenv('KV_ACCOUNT_ID', '')
KV_NAMESPACE_ID = os.getenv('KV_NAMESPACE_ID', '')
KV_API_TOKEN = os.getenv('KV_API_TOKEN', '')

MAX_UPLOAD_BYTES = int(os.getenv('MAX_UPLOAD_BYTES', str(5 * 1024 * 1024)))
BLOB_TTL_SECONDS = int(os.getenv('BLOB_TTL_SECONDS', str(60 * 60 * 24 * 7)))
CACHE_MAX_AGE = int(os.getenv('CACHE_MAX_AGE', str(BLOB_TTL_SECONDS)))
ALLOW_EMPTY_UPLOADS = os.getenv('ALLOW_EMPTY_UPLOADS', 'false').lower() == 'true'

CORS_ALLOW_ORIGIN = os.getenv('CORS_ALLOW_ORIGIN', '*')
LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO').upper()
