"""Lambda handler for the Uploads API using Mangum."""
from mangum import Mangum

from uploads_api.config.settings import get_settings
from uploads_api.main import create_app

app = create_app(get_settings())

handler = Mangum(app, lifespan="off")

lambda_handler = handler
