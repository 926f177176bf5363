# Utils package for CoShop backend
