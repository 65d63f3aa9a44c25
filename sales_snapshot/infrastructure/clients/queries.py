"""GraphQL documents for the Shopify Admin API"""

PAID_ORDERS_QUERY = """
query getOrders($first: Int!, $cursor: String, $lineItemsFirst: Int!) {
  orders(first: $first, after: $cursor, query: "financial_status:paid") {
    pageInfo {
      hasNextPage
      endCursor
    }
    edges {
      node {
        id
        name
        createdAt
        lineItems(first: $lineItemsFirst) {
          edges {
            node {
              id
              quantity
              variant {
                id
                product {
                  id
                }
              }
              discountedTotalSet {
                shopMoney {
                  amount
                  currencyCode
                }
              }
            }
          }
        }
        refunds {
          id
          createdAt
          transactions(first: 10) {
            edges {
              node {
                id
                amount
                kind
                status
              }
            }
          }
        }
      }
    }
  }
}
"""

PRODUCTS_QUERY = """
query getProducts($first: Int!, $cursor: String) {
  products(first: $first, after: $cursor) {
    pageInfo {
      hasNextPage
      endCursor
    }
    edges {
      node {
        id
        title
        handle
      }
    }
  }
}
"""

METAFIELDS_SET_MUTATION = """
mutation metafieldsSet($metafields: [MetafieldsSetInput!]!) {
  metafieldsSet(metafields: $metafields) {
    metafields {
      id
      namespace
      key
      value
    }
    userErrors {
      field
      message
    }
  }
}
"""

SHOP_INFO_QUERY = """
query shopInfo {
  shop {
    name
    myshopifyDomain
    currencyCode
  }
  products(first: 5) {
    edges {
      node {
        id
        title
        handle
      }
    }
  }
  orders(first: 5, query: "financial_status:paid") {
    edges {
      node {
        id
        name
        totalPriceSet {
          shopMoney {
            amount
            currencyCode
          }
        }
      }
    }
  }
}
"""

PRODUCT_METAFIELDS_QUERY = """
query productMetafields($first: Int!, $namespace: String!) {
  products(first: $first) {
    edges {
      node {
        id
        title
        handle
        metafields(first: 250, namespace: $namespace) {
          edges {
            node {
              id
              namespace
              key
              value
              type
            }
          }
        }
      }
    }
  }
}
"""
