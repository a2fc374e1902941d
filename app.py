import logging

import click
from flask import Flask, jsonify, redirect, request
from flask_migrate import Migrate
from werkzeug.exceptions import HTTPException

from config import get_config
from constants.validation import MAX_SERVINGS
from models import db
from services import (
    AuthProvider, RecipeExtractor, SessionStore,
    parse_recipe_from_url, save_recipe, delete_recipe, update_visibility,
    get_recipe_for_viewer, check_extraction_quota, record_extraction, explore_recipes,
    send_request, accept_request, reject_request, remove_friendship, list_friends,
    current_user, current_user_id, login_required,
    scale_ingredients, float_to_fraction, format_time,
)
from services.auth import get_provider, get_session_store, upsert_profile
from utils.errors import AppError, ValidationError, AuthorizationError, FetchError, ExtractionError
from utils.sanitizer import safe_int, sanitize_safe_redirect
from utils.url_validator import SSRFError

app = Flask(__name__)
app.config.from_object(get_config())

logging.basicConfig(
    level=app.config['LOG_LEVEL'],
    format='%(asctime)s %(levelname)s [%(name)s] %(message)s',
)
logger = logging.getLogger(__name__)

db.init_app(app)
migrate = Migrate(app, db)

app.extensions['recipe_extractor'] = RecipeExtractor(
    api_key=app.config['OPENAI_API_KEY'],
    model=app.config['OPENAI_MODEL'],
    temperature=app.config['OPENAI_TEMPERATURE'],
    max_tokens=app.config['OPENAI_MAX_TOKENS'],
    timeout=app.config['OPENAI_TIMEOUT'],
)
app.extensions['auth'] = AuthProvider(
    app.config['SUPABASE_URL'],
    app.config['SUPABASE_ANON_KEY'],
    app.config['SUPABASE_SERVICE_ROLE_KEY'],
    timeout=app.config['REQUEST_TIMEOUT'],
)
app.extensions['session_store'] = SessionStore(app.config['SESSION_REFRESH_MARGIN'])


def json_body():
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object')
    return data


# ============================================
# ERROR HANDLERS
# ============================================

@app.errorhandler(AppError)
def handle_app_error(e):
    if isinstance(e, (FetchError, ExtractionError)):
        logger.warning("%s on %s: %s", type(e).__name__, request.path, e)
    return jsonify(e.to_dict()), e.status_code


@app.errorhandler(SSRFError)
def handle_ssrf_error(e):
    logger.warning("Blocked URL on %s: %s", request.path, e)
    return jsonify({'error': f'URL not allowed: {e}'}), 400


@app.errorhandler(HTTPException)
def handle_http_error(e):
    return jsonify({'error': e.description}), e.code


@app.errorhandler(Exception)
def handle_unexpected_error(e):
    logger.exception("Unhandled error on %s %s", request.method, request.path)
    return jsonify({'error': 'Internal server error'}), 500


# ============================================
# ROUTES - EXTRACTION
# ============================================

@app.route('/api/recipe/extract', methods=['POST'])
@login_required
def recipe_extract():
    """Turn a URL into a recipe for the client to review. Nothing is saved."""
    url = json_body().get('url')
    if url is not None and not isinstance(url, str):
        raise ValidationError('url must be a string')
    url = (url or '').strip()
    if not url:
        raise ValidationError('URL is required')

    user_id = current_user_id()
    check_extraction_quota(user_id, app.config['EXTRACTION_DAILY_LIMIT'])

    recipe = parse_recipe_from_url(
        url,
        app.extensions['recipe_extractor'],
        youtube_api_key=app.config['YOUTUBE_API_KEY'],
        placeholder_image=app.config['PLACEHOLDER_IMAGE'],
        timeout=app.config['REQUEST_TIMEOUT'],
    )
    record_extraction(user_id)
    logger.info("User %s extracted %s recipe from %s", user_id, recipe['source_type'], url)
    return jsonify(recipe)


# ============================================
# ROUTES - RECIPES
# ============================================

@app.route('/api/recipe/save', methods=['POST'])
@login_required
def recipe_save():
    recipe = save_recipe(current_user_id(), json_body())
    return jsonify(recipe.to_dict()), 201


@app.route('/api/recipe/delete', methods=['DELETE'])
@login_required
def recipe_delete():
    delete_recipe(current_user_id(), json_body().get('recipeId'))
    return jsonify({'message': 'Recipe deleted successfully'})


@app.route('/api/recipe/update-visibility', methods=['PATCH'])
@login_required
def recipe_update_visibility():
    data = json_body()
    recipe = update_visibility(
        current_user_id(),
        data.get('recipeId'),
        visibility=data.get('visibility'),
        is_public=data.get('isPublic'),
    )
    return jsonify({
        'message': 'Visibility updated',
        'visibility': recipe.visibility,
        'isPublic': recipe.is_public,
    })


@app.route('/api/recipe/<recipe_id>')
def recipe_view(recipe_id):
    """Recipe detail; ?servings=N scales ingredient amounts."""
    recipe = get_recipe_for_viewer(recipe_id, current_user_id())
    data = recipe.to_dict()

    servings = safe_int(request.args.get('servings'), min_val=1, max_val=MAX_SERVINGS)
    if servings:
        data['ingredients'] = scale_ingredients(data['ingredients'], recipe.servings, servings)
        data['original_servings'] = recipe.servings
        data['servings'] = servings

    for ingredient in data['ingredients']:
        amount = ingredient.get('amount')
        ingredient['display_amount'] = float_to_fraction(amount) if isinstance(amount, (int, float)) else ''
    data['display_times'] = {
        'prep_time': format_time(recipe.prep_time),
        'cook_time': format_time(recipe.cook_time),
        'total_time': format_time(recipe.total_time),
    }
    return jsonify(data)


@app.route('/api/recipes/explore')
def recipes_explore():
    tags = [t for t in request.args.get('tags', '').split(',') if t.strip()]
    return jsonify(explore_recipes(
        current_user_id(),
        query=request.args.get('q'),
        time_filter=request.args.get('time') or None,
        tags=tags,
    ))


# ============================================
# ROUTES - FRIENDS
# ============================================

@app.route('/api/friends/add', methods=['POST'])
@login_required
def friends_add():
    friendship = send_request(
        current_user_id(), json_body().get('email'), lookup=get_provider().find_user_by_email,
    )
    return jsonify({'message': 'Friend request sent', 'friendship': friendship.to_dict()}), 201


@app.route('/api/friends/accept', methods=['POST'])
@login_required
def friends_accept():
    friendship = accept_request(current_user_id(), json_body().get('friendshipId'))
    return jsonify({'message': 'Friend request accepted', 'friendship': friendship.to_dict()})


@app.route('/api/friends/reject', methods=['POST'])
@login_required
def friends_reject():
    reject_request(current_user_id(), json_body().get('friendshipId'))
    return jsonify({'message': 'Friend request rejected'})


@app.route('/api/friends/remove', methods=['DELETE'])
@login_required
def friends_remove():
    remove_friendship(current_user_id(), json_body().get('friendshipId'))
    return jsonify({'message': 'Friend removed'})


@app.route('/api/friends/list')
@login_required
def friends_list():
    return jsonify(list_friends(current_user_id()))


# ============================================
# ROUTES - AUTH
# ============================================

def start_session(provider_session):
    """Store a fresh provider session and sync the user's profile."""
    get_session_store().save(provider_session)
    user = provider_session.get('user')
    if user:
        upsert_profile(user)
    return user


@app.route('/auth/callback')
def auth_callback():
    """OAuth/magic-link landing: exchange the code, then go back into the app."""
    target = sanitize_safe_redirect(request.args.get('redirect'), default='/')
    code = request.args.get('code')
    if not code:
        return redirect('/login?error=missing_code')
    try:
        provider_session = get_provider().exchange_code_for_session(code, request.args.get('code_verifier'))
    except AuthorizationError:
        return redirect('/login?error=auth_callback_failed')
    start_session(provider_session)
    return redirect(target)


@app.route('/api/auth/pwa-session', methods=['POST'])
def auth_pwa_session():
    """Code exchange for the installed app, which cannot follow cookie redirects."""
    data = json_body()
    code = data.get('code')
    if not code:
        raise ValidationError('Code is required')
    provider_session = get_provider().exchange_code_for_session(code, data.get('codeVerifier'))
    user = start_session(provider_session)
    return jsonify({
        'session': {
            'access_token': provider_session['access_token'],
            'refresh_token': provider_session.get('refresh_token'),
            'expires_at': get_session_store().load()['expires_at'],
        },
        'user': user,
        'success': True,
    })


@app.route('/api/auth/pwa-session')
def auth_pwa_session_status():
    return jsonify({'status': 'ok', 'endpoint': 'pwa-session'})


@app.route('/api/auth/logout', methods=['POST'])
def auth_logout():
    get_session_store().clear()
    return jsonify({'success': True})


@app.route('/api/auth/me')
def auth_me():
    user = current_user()
    if user is None:
        raise AuthorizationError()
    return jsonify({'user': user})


@app.route('/health')
def health():
    db.session.execute(db.text('SELECT 1'))
    return jsonify({'status': 'ok'})


# ============================================
# INITIALIZE DATABASE
# ============================================

@app.cli.command('init-db')
def init_db_command():
    """Create all tables without running migrations (local development)."""
    db.create_all()
    click.echo('Database initialized.')


if __name__ == '__main__':
    with app.app_context():
        db.create_all()
    # host='0.0.0.0' allows access from other devices on the network
    app.run(debug=app.config.get('DEBUG', False), host='0.0.0.0', port=5000, use_reloader=False)
