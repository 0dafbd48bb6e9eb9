from flask import Blueprint, current_app, jsonify

main = Blueprint('main', __name__)


@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the Dice Duel server!'})


@main.route('/health')
def health():
    return jsonify({'status': 'ok', 'sessions': len(current_app.extensions['dice_duel'].registry)})
