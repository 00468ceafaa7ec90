# Command line client for the MiniSocial API
import json
import os

import click
import requests

DEFAULT_API_URL = 'http://localhost:3000/api'
DEFAULT_SESSION_FILE = os.path.join(os.path.expanduser('~'), '.minisocial', 'session.json')


class ApiError(Exception):
    def __init__(self, status_code, message):
        super().__init__(f'{status_code}: {message}')
        self.status_code = status_code
        self.message = message


class SessionStore:
    """Keeps the token and user id between runs, in a small JSON file."""

    def __init__(self, path=None):
        self.path = path or os.environ.get('MINISOCIAL_SESSION', DEFAULT_SESSION_FILE)

    def load(self):
        if not os.path.exists(self.path):
            return {}
        with open(self.path) as f:
            return json.load(f)

    def save(self, token, user_id):
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(self.path, 'w') as f:
            json.dump({"token": token, "userId": user_id}, f)

    def clear(self):
        if os.path.exists(self.path):
            os.remove(self.path)

    @property
    def token(self):
        return self.load().get('token')

    @property
    def user_id(self):
        return self.load().get('userId')


class ApiClient:
    def __init__(self, base_url=DEFAULT_API_URL, store=None, http=None):
        self.base_url = base_url.rstrip('/')
        self.store = store or SessionStore()
        self.http = http or requests.Session()

    def _request(self, method, path, payload=None):
        headers = {}
        token = self.store.token
        if token:
            headers['Authorization'] = f'Bearer {token}'
        response = self.http.request(method, self.base_url + path, json=payload, headers=headers)
        try:
            body = response.json()
        except ValueError:
            body = {}
        if not response.ok:
            message = body.get('message') if isinstance(body, dict) else None
            raise ApiError(response.status_code, message or response.reason)
        return body

    def register(self, username, email, password, profile_picture_url=None):
        payload = {"username": username, "email": email, "password": password}
        if profile_picture_url:
            payload["profilePictureUrl"] = profile_picture_url
        return self._request('POST', '/register', payload)

    def login(self, username, password):
        result = self._request('POST', '/login', {"username": username, "password": password})
        self.store.save(result['token'], result['user']['id'])
        return result

    def logout(self):
        self.store.clear()

    def feed(self):
        return self._request('GET', '/posts/feed')

    def create_post(self, content, image_url=None):
        return self._request('POST', '/posts', {"content": content, "imageUrl": image_url})

    def get_post(self, post_id):
        return self._request('GET', f'/posts/{post_id}')

    def add_comment(self, post_id, content):
        return self._request('POST', f'/posts/{post_id}/comments', {"content": content})

    def toggle_like(self, post_id):
        return self._request('POST', f'/posts/{post_id}/like')['liked']

    def like_status(self, post_id):
        return self._request('GET', f'/posts/{post_id}/like-status')['liked']

    def is_following(self, user_id):
        return self._request('GET', f'/users/{user_id}/is-following')['isFollowing']

    def toggle_follow(self, user_id):
        """Follow ``user_id``, or unfollow if already following. Returns the new state."""
        if self.is_following(user_id):
            self._request('DELETE', f'/users/{user_id}/unfollow')
            return False
        self._request('POST', '/users/follow', {"followedId": user_id})
        return True

    def profile(self, user_id):
        return self._request('GET', f'/users/{user_id}')


def render_comment(comment):
    return f"  {comment['username']}: {comment['content']}"


def render_post(post):
    lines = [
        f"#{post['id']} {post['username']} ({post['created_at']})",
        f"  {post['content']}",
    ]
    if post.get('image_url'):
        lines.append(f"  [image] {post['image_url']}")
    counts = f"  Like {post.get('likeCount', 0)}"
    if 'commentCount' in post:
        counts += f"  Comment {post['commentCount']}"
    lines.append(counts)
    lines.extend(render_comment(comment) for comment in post.get('comments', []))
    return '\n'.join(lines)


def render_profile(user):
    return '\n'.join([
        user['username'],
        user.get('bio') or 'No bio available.',
        f"Posts {user['postCount']}  Followers {user['followerCount']}  Following {user['followingCount']}",
    ])


@click.group()
@click.option('--api-url', envvar='MINISOCIAL_API_URL', default=DEFAULT_API_URL, show_default=True)
@click.option('--session-file', envvar='MINISOCIAL_SESSION', default=None)
@click.pass_context
def cli(ctx, api_url, session_file):
    """Talk to a MiniSocial server."""
    ctx.obj = ApiClient(api_url, SessionStore(session_file))


def _logged_in(client):
    if not client.store.token:
        raise click.ClickException('Not logged in. Run "minisocial login" first.')


def _call(func, *args):
    try:
        return func(*args)
    except ApiError as e:
        raise click.ClickException(e.message)
    except requests.RequestException as e:
        raise click.ClickException(f'Could not reach the server: {e}')


@cli.command()
@click.argument('username')
@click.argument('email')
@click.password_option()
@click.option('--picture', 'profile_picture_url', default=None, help='Profile picture URL.')
@click.pass_obj
def register(client, username, email, password, profile_picture_url):
    _call(client.register, username, email, password, profile_picture_url)
    click.echo('Registration successful! Please log in.')


@cli.command()
@click.argument('username')
@click.option('--password', prompt=True, hide_input=True)
@click.pass_obj
def login(client, username, password):
    result = _call(client.login, username, password)
    click.echo(f"Logged in as {result['user']['username']}.")


@cli.command()
@click.pass_obj
def logout(client):
    client.logout()
    click.echo('Logged out.')


@cli.command()
@click.pass_obj
def feed(client):
    _logged_in(client)
    posts = _call(client.feed)
    if not posts:
        click.echo('No posts yet.')
    for post in posts:
        click.echo(render_post(post))
        click.echo()


@cli.command()
@click.argument('content')
@click.option('--image', 'image_url', default=None, help='Image URL to attach.')
@click.pass_obj
def post(client, content, image_url):
    _logged_in(client)
    result = _call(client.create_post, content, image_url)
    click.echo(f"Created post #{result['postId']}.")


@cli.command()
@click.argument('post_id', type=int)
@click.pass_obj
def show(client, post_id):
    _logged_in(client)
    click.echo(render_post(_call(client.get_post, post_id)))


@cli.command()
@click.argument('post_id', type=int)
@click.argument('content')
@click.pass_obj
def comment(client, post_id, content):
    _logged_in(client)
    result = _call(client.add_comment, post_id, content)
    click.echo(f"Added comment #{result['commentId']}.")


@cli.command()
@click.argument('post_id', type=int)
@click.pass_obj
def like(client, post_id):
    _logged_in(client)
    liked = _call(client.toggle_like, post_id)
    click.echo('Liked.' if liked else 'Unliked.')


@cli.command()
@click.argument('user_id', type=int)
@click.pass_obj
def follow(client, user_id):
    _logged_in(client)
    following = _call(client.toggle_follow, user_id)
    click.echo('Following.' if following else 'Unfollowed.')


@cli.command()
@click.argument('user_id', type=int, required=False)
@click.pass_obj
def profile(client, user_id):
    user_id = user_id or client.store.user_id
    if user_id is None:
        raise click.ClickException('Give a user id or log in first.')
    user = _call(client.profile, user_id)
    click.echo(render_profile(user))
    if client.store.token and user['id'] != client.store.user_id:
        following = _call(client.is_following, user['id'])
        click.echo('You follow this user.' if following else 'You do not follow this user.')


if __name__ == '__main__':
    cli()
