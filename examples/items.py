# Example:
# curl "http://127.0.0.1:5042/items?format=xml"
# curl -X POST -d "name=lamp" http://127.0.0.1:5042/items
import apiresponder
from apiresponder import Controller

api = apiresponder.API()

ITEMS = [{"id": 1, "name": "chair"}, {"id": 2, "name": "table"}]


@api.route("/items")
class Items(Controller):
    def on_get(self, req, resp):
        total = len(ITEMS)
        self.send_data(ITEMS, 200, [f"Content-Range: items 0-{total - 1}/{total}"])

    async def on_post(self, req, resp):
        params = await self.input_params()
        if "name" not in params:
            self.send_data({"error": "name is required"}, 400)

        item = {"id": len(ITEMS) + 1, "name": params["name"]}
        ITEMS.append(item)
        self.send_data(item)


@api.route("/admin")
class Admin(Controller):
    def on_get(self, req, resp):
        self.access_denied()


if __name__ == "__main__":
    api.run()
