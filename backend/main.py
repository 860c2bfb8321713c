from snap2html.app import create_app
from snap2html.server import serve

app = create_app()


if __name__ == "__main__":
    serve(app=app)
