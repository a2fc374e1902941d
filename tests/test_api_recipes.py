from datetime import timedelta

import pytest

from models import db, utcnow, Friendship, Recipe, RecipeExtraction
from services import pipeline


def save(client, headers, payload, **overrides):
    response = client.post('/api/recipe/save', json=dict(payload, **overrides), headers=headers)
    assert response.status_code == 201, response.get_json()
    return response.get_json()


def befriend(app, a, b):
    with app.app_context():
        db.session.add(Friendship(user_id=a, friend_id=b, status='accepted',
                                  pair_key=Friendship.make_pair_key(a, b)))
        db.session.commit()


# ============================================
# SAVE
# ============================================

def test_save_requires_login(client, recipe_payload):
    response = client.post('/api/recipe/save', json=recipe_payload)
    assert response.status_code == 401
    assert 'error' in response.get_json()


def test_save_defaults_and_cleanup(client, alice, recipe_payload):
    recipe = save(client, alice, recipe_payload)
    assert recipe['created_by'] == 'alice-id'
    assert recipe['visibility'] == 'private'
    assert recipe['is_public'] is False
    assert [s['step_number'] for s in recipe['instructions']] == [1, 2]
    assert recipe['ingredients'][1]['amount'] == 1.5
    assert recipe['tags'] == ['pasta', 'vegetarian']
    assert recipe['view_count'] == 0


@pytest.mark.parametrize('overrides, visibility, is_public', [
    ({'visibility': 'public'}, 'public', True),
    ({'visibility': 'friends_only'}, 'friends_only', False),
    ({'isPublic': True}, 'public', True),
    ({'is_public': False}, 'private', False),
    ({'visibility': 'friends_only', 'isPublic': True}, 'friends_only', False),
])
def test_save_visibility(client, alice, recipe_payload, overrides, visibility, is_public):
    recipe = save(client, alice, recipe_payload, **overrides)
    assert recipe['visibility'] == visibility
    assert recipe['is_public'] is is_public


@pytest.mark.parametrize('overrides', [
    {'title': ''},
    {'source_url': None},
    {'ingredients': []},
    {'instructions': []},
    {'source_type': 'instagram'},
    {'difficulty': 'impossible'},
    {'visibility': 'everyone'},
    {'source_url': 'javascript:alert(1)'},
    {'ingredients': 'flour'},
])
def test_save_rejects_invalid_input(client, alice, recipe_payload, overrides):
    response = client.post('/api/recipe/save', json=dict(recipe_payload, **overrides), headers=alice)
    assert response.status_code == 400


@pytest.mark.parametrize('value', ['inf', '1e999', 'nan'])
def test_save_non_finite_numbers_use_defaults(client, alice, recipe_payload, value):
    recipe = save(client, alice, recipe_payload, servings=value, prep_time=value)
    assert recipe['servings'] == 4
    assert recipe['prep_time'] is None


def test_save_clamps_servings(client, alice, recipe_payload):
    assert save(client, alice, recipe_payload, servings=0)['servings'] == 1
    assert save(client, alice, recipe_payload, servings='lots')['servings'] == 4


# ============================================
# DELETE / VISIBILITY
# ============================================

def test_delete_own_recipe(app, client, alice, recipe_payload):
    recipe = save(client, alice, recipe_payload)
    response = client.delete('/api/recipe/delete', json={'recipeId': recipe['id']}, headers=alice)
    assert response.status_code == 200
    with app.app_context():
        assert db.session.get(Recipe, recipe['id']) is None


def test_delete_missing_recipe(client, alice):
    response = client.delete('/api/recipe/delete', json={'recipeId': 'nope'}, headers=alice)
    assert response.status_code == 404


def test_delete_requires_recipe_id(client, alice):
    assert client.delete('/api/recipe/delete', json={}, headers=alice).status_code == 400


@pytest.mark.parametrize('visibility', ['public', 'private', 'friends_only'])
def test_non_owner_is_forbidden(app, client, alice, bob, recipe_payload, visibility):
    recipe = save(client, alice, recipe_payload, visibility=visibility)
    befriend(app, 'alice-id', 'bob-id')

    response = client.delete('/api/recipe/delete', json={'recipeId': recipe['id']}, headers=bob)
    assert response.status_code == 403
    response = client.patch('/api/recipe/update-visibility',
                            json={'recipeId': recipe['id'], 'visibility': 'public'}, headers=bob)
    assert response.status_code == 403


def test_update_visibility_is_idempotent(app, client, alice, recipe_payload):
    recipe = save(client, alice, recipe_payload)
    for _ in range(2):
        response = client.patch('/api/recipe/update-visibility',
                                json={'recipeId': recipe['id'], 'visibility': 'public'}, headers=alice)
        assert response.status_code == 200
        assert response.get_json() == {'message': 'Visibility updated', 'visibility': 'public', 'isPublic': True}

    with app.app_context():
        stored = db.session.get(Recipe, recipe['id'])
        assert stored.visibility == 'public'
        assert stored.is_public is True


@pytest.mark.parametrize('body, visibility, is_public', [
    ({'visibility': 'friends_only'}, 'friends_only', False),
    ({'isPublic': True}, 'public', True),
    ({'isPublic': False}, 'private', False),
    ({'visibility': 'private', 'isPublic': True}, 'private', False),
])
def test_update_visibility_keeps_flag_in_sync(client, alice, recipe_payload, body, visibility, is_public):
    recipe = save(client, alice, recipe_payload, visibility='public')
    response = client.patch('/api/recipe/update-visibility', json=dict(body, recipeId=recipe['id']), headers=alice)
    data = response.get_json()
    assert data['visibility'] == visibility
    assert data['isPublic'] is is_public


@pytest.mark.parametrize('body', [{'visibility': 'secret'}, {}, {'isPublic': 'yes'}])
def test_update_visibility_bad_input(client, alice, recipe_payload, body):
    recipe = save(client, alice, recipe_payload)
    response = client.patch('/api/recipe/update-visibility', json=dict(body, recipeId=recipe['id']), headers=alice)
    assert response.status_code == 400


# ============================================
# READ
# ============================================

def test_public_recipe_readable_anonymously_and_counted(client, alice, recipe_payload):
    recipe = save(client, alice, recipe_payload, visibility='public')
    first = client.get(f"/api/recipe/{recipe['id']}").get_json()
    second = client.get(f"/api/recipe/{recipe['id']}").get_json()
    assert first['view_count'] == 1
    assert second['view_count'] == 2


def test_private_recipe_hidden_from_others(client, alice, bob, recipe_payload):
    recipe = save(client, alice, recipe_payload)
    assert client.get(f"/api/recipe/{recipe['id']}", headers=bob).status_code == 404
    assert client.get(f"/api/recipe/{recipe['id']}").status_code == 404
    assert client.get(f"/api/recipe/{recipe['id']}", headers=alice).status_code == 200


def test_friends_only_recipe(app, client, alice, bob, carol, recipe_payload):
    recipe = save(client, alice, recipe_payload, visibility='friends_only')
    befriend(app, 'bob-id', 'alice-id')
    assert client.get(f"/api/recipe/{recipe['id']}", headers=bob).status_code == 200
    assert client.get(f"/api/recipe/{recipe['id']}", headers=carol).status_code == 404


def test_pending_friend_cannot_read_friends_only(app, client, alice, bob, recipe_payload):
    recipe = save(client, alice, recipe_payload, visibility='friends_only')
    with app.app_context():
        db.session.add(Friendship(user_id='bob-id', friend_id='alice-id', status='pending',
                                  pair_key=Friendship.make_pair_key('bob-id', 'alice-id')))
        db.session.commit()
    assert client.get(f"/api/recipe/{recipe['id']}", headers=bob).status_code == 404


def test_servings_scaling(client, alice, recipe_payload):
    recipe = save(client, alice, recipe_payload)
    data = client.get(f"/api/recipe/{recipe['id']}?servings=6", headers=alice).get_json()
    assert data['servings'] == 6
    assert data['original_servings'] == 4
    assert data['ingredients'][0]['amount'] == 600
    assert data['ingredients'][1]['amount'] == 2.25
    assert data['ingredients'][1]['display_amount'] == '2 1/4'
    assert data['display_times']['total_time'] == '30min'


def test_unknown_recipe(client):
    assert client.get('/api/recipe/does-not-exist').status_code == 404


def test_non_finite_servings_param_is_ignored(client, alice, recipe_payload):
    recipe = save(client, alice, recipe_payload)
    response = client.get(f"/api/recipe/{recipe['id']}?servings=inf", headers=alice)
    assert response.status_code == 200
    assert response.get_json()['servings'] == 4
    assert 'original_servings' not in response.get_json()


# ============================================
# EXPLORE
# ============================================

def test_explore_sections(app, client, alice, bob, carol, recipe_payload):
    save(client, alice, recipe_payload, title='Public Pasta', visibility='public')
    save(client, alice, recipe_payload, title='Secret Soup')
    save(client, bob, recipe_payload, title='Bob Friends Curry', visibility='friends_only', tags=['curry'])
    save(client, carol, recipe_payload, title='Carol Friends Pie', visibility='friends_only')
    befriend(app, 'alice-id', 'bob-id')

    data = client.get('/api/recipes/explore', headers=alice).get_json()
    assert [r['title'] for r in data['public']] == ['Public Pasta']
    assert [r['title'] for r in data['mine']] == ['Secret Soup']
    assert [r['title'] for r in data['friends']] == ['Bob Friends Curry']
    assert data['availableTags'] == ['curry', 'pasta', 'vegetarian']

    anonymous = client.get('/api/recipes/explore').get_json()
    assert anonymous['mine'] == [] and anonymous['friends'] == []


def test_explore_filters(client, alice, recipe_payload):
    save(client, alice, recipe_payload, title='Quick Salad', total_time=15, tags=['salad'], visibility='public')
    save(client, alice, recipe_payload, title='Slow Roast', total_time=240, tags=['meat'], visibility='public')
    save(client, alice, recipe_payload, title='No Time', total_time=None, visibility='public')

    def titles(query):
        return sorted(r['title'] for r in client.get(f'/api/recipes/explore?{query}').get_json()['public'])

    assert titles('time=30') == ['Quick Salad']
    assert titles('time=120%2B') == ['Slow Roast']
    assert titles('q=ROAST') == ['Slow Roast']
    assert titles('q=salad') == ['Quick Salad']
    assert titles('tags=salad') == ['Quick Salad']
    assert titles('tags=salad,meat') == []


def test_explore_invalid_time_filter(client):
    assert client.get('/api/recipes/explore?time=15').status_code == 400


# ============================================
# EXTRACT
# ============================================

def fake_page(url, timeout=15, placeholder_image=''):
    return {'title': 'Pasta', 'content': 'Recipe: Pasta', 'image': '', 'ingredients': [],
            'instructions': [], 'structured': True}


def test_extract_returns_parsed_recipe(client, alice, extractor, monkeypatch):
    monkeypatch.setattr(pipeline, 'scrape_website', fake_page)
    response = client.post('/api/recipe/extract', json={'url': 'https://example.com/pasta'}, headers=alice)
    assert response.status_code == 200
    data = response.get_json()
    assert data['source_type'] == 'website'
    assert data['image_url'] == '/placeholder-recipe.svg'
    assert len(extractor.calls) == 1


def test_extract_rate_limit(client, alice, bob, monkeypatch):
    monkeypatch.setattr(pipeline, 'scrape_website', fake_page)
    for _ in range(10):
        response = client.post('/api/recipe/extract', json={'url': 'https://example.com/a'}, headers=alice)
        assert response.status_code == 200
    response = client.post('/api/recipe/extract', json={'url': 'https://example.com/a'}, headers=alice)
    assert response.status_code == 429
    # other users have their own quota
    response = client.post('/api/recipe/extract', json={'url': 'https://example.com/a'}, headers=bob)
    assert response.status_code == 200


def test_failed_extractions_do_not_count(client, alice, monkeypatch):
    monkeypatch.setattr(pipeline, 'fetch_youtube_info', lambda url, api_key=None, timeout=15: {
        'title': 'Snack', 'description': 'x' * 40, 'thumbnail': '',
    })
    for _ in range(11):
        response = client.post('/api/recipe/extract', json={'url': 'https://youtu.be/abc'}, headers=alice)
        assert response.status_code == 400
        assert response.get_json()['code'] == 'INSUFFICIENT_CONTENT'
        assert not response.get_json()['error'].startswith('INSUFFICIENT_CONTENT')


def test_extract_requires_url(client, alice):
    assert client.post('/api/recipe/extract', json={}, headers=alice).status_code == 400


def test_extract_invalid_youtube_url(client, alice):
    response = client.post('/api/recipe/extract', json={'url': 'https://www.youtube.com/'}, headers=alice)
    assert response.status_code == 400
    assert response.get_json() == {'error': 'Invalid YouTube URL'}


def test_extract_blocks_private_addresses(client, alice):
    response = client.post('/api/recipe/extract', json={'url': 'http://127.0.0.1/admin'}, headers=alice)
    assert response.status_code == 400


def test_extract_rejects_non_string_url(client, alice):
    response = client.post('/api/recipe/extract', json={'url': 123}, headers=alice)
    assert response.status_code == 400
    assert response.get_json() == {'error': 'url must be a string'}


def seed_extractions(app, user_id, hours_ago, count=10):
    with app.app_context():
        for _ in range(count):
            db.session.add(RecipeExtraction(user_id=user_id, created_at=utcnow() - timedelta(hours=hours_ago)))
        db.session.commit()


def test_extractions_older_than_a_day_do_not_count(app, client, alice, monkeypatch):
    monkeypatch.setattr(pipeline, 'scrape_website', fake_page)
    seed_extractions(app, 'alice-id', hours_ago=25)
    response = client.post('/api/recipe/extract', json={'url': 'https://example.com/a'}, headers=alice)
    assert response.status_code == 200


def test_extractions_within_a_day_count(app, client, alice, monkeypatch):
    monkeypatch.setattr(pipeline, 'scrape_website', fake_page)
    seed_extractions(app, 'alice-id', hours_ago=23)
    response = client.post('/api/recipe/extract', json={'url': 'https://example.com/a'}, headers=alice)
    assert response.status_code == 429
