from mangum import Mangum
from main import app

handler = Mangum(app, lifespan="off")

def lambda_handler(event, context):
    """AWS Lambda entry point for the admin API"""
    return handler(event, context)
