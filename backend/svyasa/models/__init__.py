from .post import Post
from .comment import Comment
from .admin import AdminUser
