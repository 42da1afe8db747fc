"""Main FastAPI application for MedBlogAPI."""

import os
import logging
from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles
from fastapi.middleware.cors import CORSMiddleware
from dotenv import load_dotenv

from src.database import init_db, seed_categories, seed_demo_users
from src.errors import register_exception_handlers
from src.routers import auth, blog
from src.uploads import PATH_UPLOADS, UPLOADS_URL_PREFIX, blog_images_path

# Load environment variables
load_dotenv()

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(),
        logging.FileHandler(os.getenv("PATH_LOG_FILE", "medblog_api.log"))
    ]
)

logger = logging.getLogger(__name__)

# Get configuration from environment
NAME_APP = os.getenv("NAME_APP", "MedBlogAPI")

# Create FastAPI application
app = FastAPI(
    title=NAME_APP,
    description="Doctor-patient blog API: doctors publish posts, patients read them",
    version="1.0.0"
)

# Configure CORS (adjust origins as needed)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Include routers
app.include_router(auth.router)
app.include_router(blog.router)

# Ensure uploads directory exists
images_path = blog_images_path()
logger.info(f"Blog images directory: {images_path}")

# Mount static files for serving uploaded images
app.mount(UPLOADS_URL_PREFIX, StaticFiles(directory=str(PATH_UPLOADS)), name="uploads")
logger.info(f"Mounted static files at {UPLOADS_URL_PREFIX}")


@app.on_event("startup")
def startup_event():
    """Initialize database and seed categories and demo users on startup."""
    logger.info(f"Starting {NAME_APP}")
    init_db()
    logger.info("Database initialized successfully")
    seed_categories()
    seed_demo_users()
    logger.info("Seeding completed")


@app.get("/")
def root():
    """Root endpoint listing the available routes."""
    return {
        "name": NAME_APP,
        "version": "1.0.0",
        "status": "running",
        "endpoints": {
            "register": "POST /api/auth/register",
            "login": "POST /api/auth/login",
            "categories": "GET /api/blog/categories",
            "posts": "GET /api/blog/posts",
            "posts_by_category": "GET /api/blog/posts/by-category",
            "post": "GET /api/blog/posts/{id}",
            "create_post": "POST /api/blog/posts (doctor only)",
            "my_posts": "GET /api/blog/posts/my-posts (doctor only)",
            "update_post": "PUT /api/blog/posts/{id} (author only)",
            "delete_post": "DELETE /api/blog/posts/{id} (author only)"
        }
    }


@app.get("/health")
def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
