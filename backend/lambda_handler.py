from mangum import Mangum
from main import app

# AWS Lambda entrypoint. Uploads are staged under UPLOAD_DIR, which must point
# at a writable location such as /tmp on Lambda.
handler = Mangum(app)
