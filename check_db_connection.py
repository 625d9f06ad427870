import sys
from farmlog.config import settings
from farmlog.storage import open_backend

PROBE_KEY = "connection_probe"

def check_connection():
    print(f"--- Checking '{settings.storage_backend}' storage backend ---")
    if settings.storage_backend == "mongo":
        uri = settings.final_mongo_uri
        print(f"Connection String (masked): {uri.split('@')[-1] if '@' in uri else '...local...'}")

    try:
        backend = open_backend(settings)
        if settings.storage_backend == "mongo":
            # The ping command is cheap and does not require auth.
            backend.client.admin.command("ping")
        else:
            backend.get(PROBE_KEY)
        print("✅ Backend reachable!")
        return True
    except Exception as e:
        print("❌ Backend check failed!")
        print(f"Error: {e}")
        return False

if __name__ == "__main__":
    if check_connection():
        sys.exit(0)
    else:
        sys.exit(1)
