import os
from dotenv import load_dotenv
from fastapi import HTTPException, Header

load_dotenv()

api_key = os.getenv("FARMASSIST_API_KEY")

# No key configured => open access (local development)
def validate_api_key(x_api_key: str = Header(None)):
    if api_key and x_api_key != api_key:
        raise HTTPException(status_code=401, detail="Invalid or missing API Key")
