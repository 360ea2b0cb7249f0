from app.menagerie import create_app

app = create_app()
