from medicare import create_app

app = create_app()


if __name__ == "__main__":
    # One storefront session per process; serve requests one at a time.
    app.run(host="0.0.0.0", port=int(app.config.get("PORT", 5000)), threaded=False)
