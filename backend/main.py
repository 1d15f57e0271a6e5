from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse
from mangum import Mangum
from config import ENVIRONMENT
from policy.errors import PolicyError
import logging

from routers.auth.auth import router as auth_router
from routers.vendors.vendors import router as vendors_router
from routers.admin.admin import router as admin_router
from routers.categories.categories import router as categories_router
from routers.products.products import router as products_router
from routers.coupons.coupons import router as coupons_router
from routers.orders.orders import router as orders_router
from routers.feedback.feedback import router as feedback_router
from routers.notifications.notifications import router as notifications_router
from routers.sliders.sliders import router as sliders_router

IS_PRODUCTION = ENVIRONMENT == "prod"

logging.basicConfig(
    level=logging.INFO if IS_PRODUCTION else logging.DEBUG,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="FoodHub Admin API",
    description="Admin dashboard API for the FoodHub multi-vendor food ordering platform: vendor onboarding, catalog, coupons, orders and notifications.",
    version="1.0.0",
    root_path="/Prod" if IS_PRODUCTION else "",
    docs_url="/apidocs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    servers=[
        {"url": "https://your-aws-api.execute-api.region.amazonaws.com/Prod", "description": "Production Server"},
        {"url": "http://localhost:8000", "description": "Local Development Server"},
    ],
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_router)
app.include_router(vendors_router)
app.include_router(admin_router)
app.include_router(categories_router)
app.include_router(products_router)
app.include_router(coupons_router)
app.include_router(orders_router)
app.include_router(feedback_router)
app.include_router(notifications_router)
app.include_router(sliders_router)


@app.exception_handler(PolicyError)
async def policy_error_handler(request: Request, exc: PolicyError):
    """Policy errors that escape a route surface with their own status and message"""
    logger.warning(f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.get("/docs", include_in_schema=False)
async def api_documentation(request: Request):
    openapi_url = "/Prod/openapi.json" if IS_PRODUCTION else "/openapi.json"

    return HTMLResponse(
        f"""
<!doctype html>
<html lang="en">
  <head>
    <meta charset="utf-8">
    <meta name="viewport" content="width=device-width, initial-scale=1, shrink-to-fit=no">
    <title>FoodHub Admin API DOCS</title>

    <script src="https://unpkg.com/@stoplight/elements/web-components.min.js"></script>
    <link rel="stylesheet" href="https://unpkg.com/@stoplight/elements/styles.min.css">
  </head>
  <body>

    <elements-api
      apiDescriptionUrl="{openapi_url}"
      router="hash"
      theme="dark"
    />

  </body>
</html>"""
    )


API_SECTIONS = (
    ("Vendors", "Registration, approval, suspension and profiles"),
    ("Catalog", "Categories, products and offers"),
    ("Coupons", "Discount codes per vendor or platform-wide"),
    ("Orders", "Order history, customers and revenue stats"),
    ("Engagement", "Feedback, notifications and home sliders"),
)


@app.get("/", response_class=HTMLResponse)
def home():
    """Landing page listing the API areas and documentation links"""
    sections = "".join(f"<tr><td><b>{name}</b></td><td>{summary}</td></tr>" for name, summary in API_SECTIONS)
    return f"""
    <html>
      <head>
        <title>FoodHub Admin API</title>
        <style>
          body {{ font-family: Helvetica, sans-serif; margin: 32px; color: #222; }}
          td {{ padding: 4px 12px 4px 0; }}
          nav a {{ margin-right: 16px; color: #d35400; }}
        </style>
      </head>
      <body>
        <h1>FoodHub Admin API</h1>
        <p>Environment: {ENVIRONMENT}</p>
        <table>{sections}</table>
        <nav>
          <a href="/docs">Stoplight docs</a>
          <a href="/redoc">ReDoc</a>
          <a href="/apidocs">Swagger UI</a>
          <a href="/openapi.json">OpenAPI schema</a>
        </nav>
      </body>
    </html>
    """


handler = Mangum(app)
