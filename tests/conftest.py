import os
import sys
from pathlib import Path


# Add project root to path
root = Path(__file__).resolve().parents[1]
project_root = str(root)
if project_root not in sys.path:
    sys.path.insert(0, project_root)

# Set environment variables for testing (before settings are first loaded)
os.environ.setdefault("CRM_HOST", "https://test-org.crm.dynamics.com")
os.environ.setdefault("CRM_URL_PATH", "/api/data/v9.1/")
os.environ.setdefault("CRM_TOKEN", "test-token-123")
