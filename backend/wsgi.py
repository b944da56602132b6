from channelstock import create_app

app = create_app()
