MONEY_FIELDS = "amount currencyCode"
IMAGE_FIELDS = "url altText width height"

PRODUCT_CARD_FRAGMENT = f"""
fragment ProductCard on Product {{
  id
  handle
  title
  tags
  vendor
  productType
  priceRange {{ minVariantPrice {{ {MONEY_FIELDS} }} }}
  featuredImage {{ {IMAGE_FIELDS} }}
}}
"""

PRODUCTS_QUERY = (
    """
query Products($query: String!, $first: Int!) {
  products(first: $first, query: $query) {
    nodes { ...ProductCard }
  }
}
"""
    + PRODUCT_CARD_FRAGMENT
)

PRODUCT_QUERY = (
    f"""
query Product($handle: String!) {{
  product(handle: $handle) {{
    ...ProductCard
    description
    descriptionHtml
    images(first: 20) {{ nodes {{ {IMAGE_FIELDS} }} }}
    variants(first: 100) {{
      nodes {{
        id
        title
        availableForSale
        sku
        price {{ {MONEY_FIELDS} }}
        compareAtPrice {{ {MONEY_FIELDS} }}
        selectedOptions {{ name value }}
        image {{ {IMAGE_FIELDS} }}
      }}
    }}
    material: metafield(namespace: "custom", key: "material") {{ value }}
  }}
}}
"""
    + PRODUCT_CARD_FRAGMENT
)

COLLECTIONS_QUERY = f"""
query Collections($first: Int!) {{
  collections(first: $first) {{
    nodes {{ id handle title description image {{ {IMAGE_FIELDS} }} }}
  }}
}}
"""

COLLECTION_QUERY = (
    f"""
query Collection(
  $handle: String!
  $first: Int!
  $after: String
  $sortKey: ProductCollectionSortKeys
  $reverse: Boolean
) {{
  collection(handle: $handle) {{
    id
    handle
    title
    description
    image {{ {IMAGE_FIELDS} }}
    products(first: $first, after: $after, sortKey: $sortKey, reverse: $reverse) {{
      nodes {{ ...ProductCard }}
      pageInfo {{ hasNextPage endCursor }}
    }}
  }}
}}
"""
    + PRODUCT_CARD_FRAGMENT
)

SEARCH_QUERY = (
    """
query Search($query: String!, $first: Int!, $after: String) {
  search(query: $query, first: $first, after: $after, types: [PRODUCT]) {
    totalCount
    nodes { ... on Product { ...ProductCard } }
    pageInfo { hasNextPage endCursor }
  }
}
"""
    + PRODUCT_CARD_FRAGMENT
)

PREDICTIVE_SEARCH_QUERY = (
    f"""
query PredictiveSearch($query: String!, $limit: Int!) {{
  predictiveSearch(query: $query, limit: $limit) {{
    products {{ ...ProductCard }}
    collections {{ id handle title description image {{ {IMAGE_FIELDS} }} }}
    queries {{ text styledText }}
  }}
}}
"""
    + PRODUCT_CARD_FRAGMENT
)

POLICY_FIELDS = "id handle title body url"

POLICIES_QUERY = f"""
query Policies {{
  shop {{
    privacyPolicy {{ {POLICY_FIELDS} }}
    shippingPolicy {{ {POLICY_FIELDS} }}
    termsOfService {{ {POLICY_FIELDS} }}
    refundPolicy {{ {POLICY_FIELDS} }}
  }}
}}
"""

CART_FIELDS = f"""
fragment CartFields on Cart {{
  id
  checkoutUrl
  totalQuantity
  cost {{
    subtotalAmount {{ {MONEY_FIELDS} }}
    totalAmount {{ {MONEY_FIELDS} }}
  }}
  lines(first: 100) {{
    nodes {{
      id
      quantity
      merchandise {{
        ... on ProductVariant {{
          id
          title
          price {{ {MONEY_FIELDS} }}
          image {{ {IMAGE_FIELDS} }}
          product {{ handle title }}
        }}
      }}
    }}
  }}
}}
"""

CART_QUERY = (
    """
query Cart($id: ID!) {
  cart(id: $id) { ...CartFields }
}
"""
    + CART_FIELDS
)

CART_CREATE_MUTATION = (
    """
mutation CartCreate($input: CartInput!) {
  cartCreate(input: $input) {
    cart { ...CartFields }
    userErrors { field message }
  }
}
"""
    + CART_FIELDS
)

CART_LINES_ADD_MUTATION = (
    """
mutation CartLinesAdd($cartId: ID!, $lines: [CartLineInput!]!) {
  cartLinesAdd(cartId: $cartId, lines: $lines) {
    cart { ...CartFields }
    userErrors { field message }
  }
}
"""
    + CART_FIELDS
)

CART_LINES_UPDATE_MUTATION = (
    """
mutation CartLinesUpdate($cartId: ID!, $lines: [CartLineUpdateInput!]!) {
  cartLinesUpdate(cartId: $cartId, lines: $lines) {
    cart { ...CartFields }
    userErrors { field message }
  }
}
"""
    + CART_FIELDS
)

CART_LINES_REMOVE_MUTATION = (
    """
mutation CartLinesRemove($cartId: ID!, $lineIds: [ID!]!) {
  cartLinesRemove(cartId: $cartId, lineIds: $lineIds) {
    cart { ...CartFields }
    userErrors { field message }
  }
}
"""
    + CART_FIELDS
)
