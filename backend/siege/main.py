from flask import Blueprint, jsonify

from siege import rooms

main = Blueprint('main', __name__)


@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the Siege game server!', 'rooms': len(rooms)})
