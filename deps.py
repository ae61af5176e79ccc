"""Centralized imports for the entire project (app + basic_porter)."""

# Standard library
import html
import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

# External
from dotenv import load_dotenv
from fastapi import (
    APIRouter,
    HTTPException,
)
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, Response
from pydantic import BaseModel, Field
